"""Entry point for running the FX rate refresh service."""

from __future__ import annotations

import os
import time

from dotenv import load_dotenv

from app import create_app
from app.services.scheduler import shutdown_scheduler


def _prepare_environment() -> None:
    """Load environment variables from a local .env file if present."""

    project_root = os.path.abspath(os.path.dirname(__file__))
    env_file = os.path.join(project_root, ".env")
    if os.path.exists(env_file):
        load_dotenv(env_file)


def main() -> None:
    """Create the app and keep the refresh scheduler alive until interrupted."""

    _prepare_environment()

    config_name = os.getenv("APP_ENV")
    app = create_app(config_name=config_name)
    if app.extensions.get("apscheduler") is None:
        app.logger.info("Scheduler disabled; nothing to run. Use `flask refresh-rates` for a one-off pass.")
        return

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        shutdown_scheduler(app, wait=True)


if __name__ == "__main__":
    main()
