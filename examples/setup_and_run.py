"""
Run the backend with an in-memory sample document and local speech only.

This script:
1. Adds a sample document to a LocalPageProvider
2. Wires a controller that narrates with the operating system's voice
3. Starts the FastAPI backend server

No AWS credentials, PDF tooling or audio device libraries beyond pyttsx3
are needed.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from page_narrator.application.api import create_app
from page_narrator.application.controller import SessionController
from page_narrator.domain.services import ReadingService, SpeechGateway
from page_narrator.infrastructure import LocalPageProvider, LocalProgressRepository
from page_narrator.infrastructure.pyttsx3_synthesizer import Pyttsx3Synthesizer

SAMPLE_SOURCE = "memory://bathtub-safari"


def build_sample_controller() -> SessionController:
    """Wire a controller around a three-page sample document."""

    print("=" * 60)
    print("Setting up sample data...")
    print("=" * 60)

    page_provider = LocalPageProvider()
    page_provider.add_document(
        SAMPLE_SOURCE,
        [
            "The bathtub was an ocean, and the rubber duck was a ship.",
            "",
            "When the water went cold, the safari was over. The end.",
        ],
    )
    print(f"\n✓ Added document: {SAMPLE_SOURCE} (3 pages, page 2 is blank)")

    progress_repository = LocalProgressRepository()
    reading_service = ReadingService(
        page_provider=page_provider,
        gateway=SpeechGateway(local=Pyttsx3Synthesizer()),
        progress_repository=progress_repository,
    )

    print("\n" + "=" * 60)
    print("Sample data setup complete!")
    print("=" * 60)
    print("\nYou can now:")
    print(f'1. POST /session/open with {{"source": "{SAMPLE_SOURCE}", "language_code": "en-US"}}')
    print("2. POST /session/reading/toggle to start narration")
    print("3. Follow updates on ws://localhost:8000/ws")
    print("\n" + "=" * 60 + "\n")

    return SessionController(
        reading_service=reading_service,
        progress_repository=progress_repository,
        default_language_code="en-US",
    )


def run_server():
    """Run the FastAPI server."""
    import uvicorn

    app = create_app(controller=build_sample_controller())

    # Start the server
    print("Starting FastAPI server on http://localhost:8000")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )


if __name__ == "__main__":
    run_server()
