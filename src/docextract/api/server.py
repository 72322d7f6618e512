"""
ASGI entry point for the DocExtract API.

Loads ``.env`` before the application factory runs so that bucket names and
the storage backend are visible to the cached settings.

Usage
-----
    $ python -m docextract.api.server
    $ uvicorn docextract.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from docextract.api.app import create_app

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
load_dotenv(dotenv_path=Path(".env"))

app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    uvicorn.run(
        "docextract.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
