"""Logging configuration for the application."""
import logging
import logging.config
import sys
from pathlib import Path

from minhavez.config.settings import settings


def setup_logging():
    """Setup logging configuration."""

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    detailed_format = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "simple",
            "stream": sys.stdout,
        },
    }
    app_handlers = ["console"]
    access_handlers = ["console"]
    error_handlers = ["console"]

    if settings.LOG_TO_FILE:
        logs_dir = Path(settings.LOG_DIR)
        logs_dir.mkdir(parents=True, exist_ok=True)
        rotating = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "detailed",
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }
        handlers["file"] = {**rotating, "level": "DEBUG", "filename": str(logs_dir / "app.log")}
        handlers["error_file"] = {**rotating, "level": "ERROR", "filename": str(logs_dir / "error.log")}
        handlers["access_file"] = {**rotating, "level": "INFO", "filename": str(logs_dir / "access.log")}
        app_handlers = ["console", "file"]
        access_handlers = ["access_file"]
        error_handlers = ["console", "error_file"]

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": log_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": detailed_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            # Root logger
            "": {
                "level": settings.LOG_LEVEL.upper(),
                "handlers": app_handlers,
                "propagate": False,
            },
            # Application logger
            "minhavez": {
                "level": "DEBUG" if settings.DEBUG else settings.LOG_LEVEL.upper(),
                "handlers": app_handlers,
                "propagate": False,
            },
            # Realtime bridge is chatty; keep it at INFO unless asked otherwise
            "minhavez.services.realtime": {
                "level": "INFO",
                "handlers": app_handlers,
                "propagate": False,
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": app_handlers,
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": access_handlers,
                "propagate": False,
            },
            # Supabase / HTTP client noise
            "httpx": {
                "level": "WARNING",
                "handlers": app_handlers,
                "propagate": False,
            },
            "minhavez.errors": {
                "level": "ERROR",
                "handlers": error_handlers,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)

    logger = logging.getLogger("minhavez")
    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)
