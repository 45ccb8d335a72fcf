import asyncio
import json
import logging
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from ..domain.entities import (
    ClientMessage,
    ErrorCode,
    ErrorMessage,
    MuteToggle,
    OutboundMessage,
    PageGoto,
    PageNext,
    PagePrev,
    ReadingToggle,
    SessionClose,
    SessionStateUpdate,
)

if TYPE_CHECKING:
    from .controller import SessionController

logger = logging.getLogger(__name__)

_client_message_adapter = TypeAdapter(ClientMessage)


class WebSocketHandler:
    """Bridges one WebSocket connection to the session controller.

    Outbound session messages are forwarded as JSON text frames; inbound
    text frames are parsed as control messages and applied in order.
    """

    def __init__(self, controller: "SessionController"):
        self._controller = controller

    async def handle_websocket(self, websocket: WebSocket) -> None:
        # Note: websocket.accept() is called by the API endpoint before this
        await websocket.send_json(
            SessionStateUpdate(session=self._controller.snapshot()).model_dump(mode="json")
        )

        send_task = asyncio.create_task(self._send_loop(websocket), name="ws-send")
        receive_task = asyncio.create_task(self._receive_loop(websocket), name="ws-receive")
        try:
            done, _ = await asyncio.wait(
                {send_task, receive_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            logger.debug(f"asyncio.wait returned: done={[t.get_name() for t in done]}")
            for task in done:
                exc = None if task.cancelled() else task.exception()
                if exc:
                    raise exc
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {websocket.client}")
        except Exception as e:
            logger.error(f"WebSocket error: {e}", exc_info=True)
        finally:
            # Both loops end with the connection, including when this handler is cancelled
            for t in (send_task, receive_task):
                t.cancel()
            await asyncio.gather(send_task, receive_task, return_exceptions=True)

            if websocket.client_state != WebSocketState.DISCONNECTED:
                try:
                    await websocket.close()
                except Exception as e:
                    logger.debug(f"WebSocket already closed: {e}")
            logger.info(f"WebSocket connection closed: {websocket.client}")

    async def _send_loop(self, websocket: WebSocket) -> None:
        queue = self._controller.reading_service.outbound_queue
        while True:
            item: OutboundMessage = await queue.get()
            data = item.to_wire()
            logger.debug(f"_send_loop sending {data.get('type')}")
            await websocket.send_text(json.dumps(data))

    async def _receive_loop(self, websocket: WebSocket) -> None:
        """Receive control messages from the client and apply them."""
        while True:
            data = await websocket.receive()

            if data.get("type") == "websocket.disconnect":
                logger.info(f"Client disconnected: code={data.get('code')}")
                break

            if data.get("type") == "websocket.receive" and data.get("text") is not None:
                await self._handle_text(websocket, data["text"])
            elif data.get("type") == "websocket.receive":
                await self._send_error(websocket, ErrorCode.INVALID_MESSAGE, "Binary frames are not supported")

    async def _handle_text(self, websocket: WebSocket, text: str) -> None:
        try:
            message = _client_message_adapter.validate_json(text)
        except ValidationError as e:
            logger.warning(f"Invalid control message: {e.errors()[0].get('msg') if e.errors() else e}")
            await self._send_error(websocket, ErrorCode.INVALID_MESSAGE, f"Invalid control message: {text[:100]}")
            return

        await self._handle_control_message(websocket, message)

    async def _handle_control_message(self, websocket: WebSocket, message) -> None:
        """Dispatch a parsed control message to the controller."""
        logger.info(f"Control message: {message.type}")
        controller = self._controller

        match message:
            case PageNext():
                await controller.next_page()
            case PagePrev():
                await controller.previous_page()
            case PageGoto(page=page):
                total_pages = controller.snapshot().total_pages
                if page > total_pages:
                    await self._send_error(
                        websocket,
                        ErrorCode.INVALID_PAGE,
                        f"Page {page} out of range 1-{total_pages}",
                    )
                    return
                await controller.go_to_page(page)
            case ReadingToggle():
                await controller.toggle_reading()
            case MuteToggle():
                controller.toggle_mute()
            case SessionClose():
                await controller.close()
            case _:
                raise ValueError(f"Unknown control message: {type(message)}")

    async def _send_error(self, websocket: WebSocket, code: ErrorCode, message: str) -> None:
        await websocket.send_json(ErrorMessage(code=code, message=message).model_dump(mode="json"))
