#!/usr/bin/env python3
"""
Console client for the page narrator WebSocket endpoint.

Prints every server message and sends control messages typed on stdin:

    n        next page
    p        previous page
    g <N>    go to page N
    r        start/stop reading
    m        mute/unmute
    c        close the document
    q        quit

Usage:
    python demo_ws_client.py [ws://localhost:8000/ws]

Start the server first, e.g. ``python examples/setup_and_run.py``, and open
a document with POST /session/open.
"""

import asyncio
import json
import logging
import sys
from datetime import datetime

import websockets

logging.basicConfig(level=logging.WARNING)

WS_URL = "ws://localhost:8000/ws"

COMMANDS = {
    "n": {"type": "page.next"},
    "p": {"type": "page.prev"},
    "r": {"type": "reading.toggle"},
    "m": {"type": "mute.toggle"},
    "c": {"type": "session.close"},
}


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


def format_message(data: dict) -> str:
    """One console line per server message."""
    msg_type = data.get("type")
    if msg_type == "session.state":
        session = data["session"]
        flags = []
        if session["is_reading"]:
            flags.append("reading")
        if session["is_muted"]:
            flags.append("muted")
        return (
            f"[{session['state']}] page {session['current_page']}/{session['total_pages']}"
            f" {' '.join(flags)}".rstrip()
        )
    if msg_type == "page.change":
        how = "auto" if data.get("automatic") else data.get("direction") or "jump"
        return f"→ page {data['page']} ({how})"
    if msg_type == "server_notice":
        return f"notice: {data['message']}"
    if msg_type == "error":
        return f"error {data['code']}: {data['message']}"
    return json.dumps(data)


def parse_command(line: str):
    """Translate a console line into a control message, or None."""
    parts = line.strip().split()
    if not parts:
        return None
    if parts[0] == "g" and len(parts) == 2 and parts[1].isdigit():
        return {"type": "page.goto", "page": int(parts[1])}
    return COMMANDS.get(parts[0])


async def run_client(url: str) -> None:
    print(f"Connecting to WebSocket at {url}...")
    async with websockets.connect(url) as websocket:
        print("✓ Connected (n/p/g N/r/m/c, q to quit)")

        async def receive_messages():
            try:
                async for raw in websocket:
                    print(f"[{_timestamp()}] {format_message(json.loads(raw))}")
            except websockets.exceptions.ConnectionClosed:
                print(f"\n[{_timestamp()}] Connection closed")

        async def send_commands():
            while True:
                line = await asyncio.to_thread(sys.stdin.readline)
                if not line or line.strip() == "q":
                    return
                message = parse_command(line)
                if message is None:
                    print("? unknown command")
                    continue
                await websocket.send(json.dumps(message))

        receive_task = asyncio.create_task(receive_messages())
        send_task = asyncio.create_task(send_commands())
        done, pending = await asyncio.wait({receive_task, send_task}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)


if __name__ == "__main__":
    try:
        asyncio.run(run_client(sys.argv[1] if len(sys.argv) > 1 else WS_URL))
    except KeyboardInterrupt:
        print("\n\n🛑 Stopped")
