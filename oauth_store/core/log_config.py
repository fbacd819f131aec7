"""Logging setup"""

from pathlib import Path
import logging

from oauth_store.config import Settings, settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(app_settings: Settings = settings) -> None:
    """
    Configure root logging from settings

    Logs always go to stderr; LOG_FILE adds a file handler, creating its
    directory if needed.
    """
    handlers: list = [logging.StreamHandler()]

    log_file = app_settings.get_log_file()
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, app_settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
