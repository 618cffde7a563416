"""Command-line launcher for the leftover tracker API."""

import os

import uvicorn

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def main() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(
        "leftover_tracker.api.asgi:app",
        host=os.environ.get("HOST", DEFAULT_HOST),
        port=int(os.environ.get("PORT", DEFAULT_PORT)),
    )


if __name__ == "__main__":
    main()
