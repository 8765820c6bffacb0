"""
Logging setup for hosts embedding the pattern insight engine

The engine only creates module loggers; the host application calls
configure_logging() once at startup, before serving insights.
"""
import logging

from reflxy.config import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging with the standard reflxy format"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, level.upper(), logging.INFO)
    )
