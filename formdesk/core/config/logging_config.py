import logging.config
import os

from formdesk.core.config.settings import Settings, get_settings

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s"

def rotating_json_handler(settings: Settings, filename: str, level: str = "NOTSET") -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "filename": os.path.join(settings.LOG_DIR, filename),
        "maxBytes": settings.LOG_FILE_MAX_BYTES,
        "backupCount": settings.LOG_FILE_BACKUPS,
        "level": level,
    }

def build_logging_config(settings: Settings) -> dict:
    """
    dictConfig payload: plain text on stdout, JSON lines in app.log,
    errors only in error.log. Third-party loggers are capped at WARNING.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": PLAIN_FORMAT},
            "json": {"()": "pythonjsonlogger.json.JsonFormatter", "fmt": JSON_FIELDS},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            },
            "app_log": rotating_json_handler(settings, "app.log"),
            "error_log": rotating_json_handler(settings, "error.log", level="ERROR"),
        },
        "root": {"handlers": ["stdout", "app_log"], "level": "WARNING"},
        "loggers": {
            "formdesk": {
                "handlers": ["stdout", "app_log", "error_log"],
                "level": settings.LOG_LEVEL,
                "propagate": False,
            },
        },
    }

def setup_logging(settings: Settings = None) -> logging.Logger:
    settings = settings or get_settings()
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))
    return logging.getLogger("formdesk")
