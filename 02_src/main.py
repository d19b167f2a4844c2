"""Main entry point for the PairSpace LINE bot."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from pairspace.api import create_fastapi_app
from pairspace.app import Application
from pairspace.config import Settings
from pairspace.logging_config import setup_logging


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file, settings.log_format)

    app = create_fastapi_app(Application(settings=settings))

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
