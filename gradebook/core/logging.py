import copy
import logging
import logging.config
import os
from gradebook.core.config import settings

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "stream": "ext://sys.stdout"
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "INFO",
            "formatter": "detailed",
            "filename": "app.log",
            "maxBytes": 10485760,
            "backupCount": 5
        },
        "error_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "detailed",
            "filename": "error.log",
            "maxBytes": 10485760,
            "backupCount": 5
        }
    },
    "root": {
        "level": "INFO",
        "handlers": ["console", "file", "error_file"]
    },
    "loggers": {
        "gradebook": {
            "level": "INFO",
            "handlers": ["console", "file"],
            "propagate": False
        },
        "gradebook.middleware.logging": {
            "level": "INFO",
            "handlers": ["console", "file"],
            "propagate": False
        },
        "uvicorn.access": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False
        }
    }
}

def build_logging_config(level: str = None, log_to_file: bool = None, log_dir: str = None) -> dict:
    """LOGGING_CONFIG resolved against settings; file handlers are dropped unless LOG_TO_FILE is set."""
    level = (level or settings.LOG_LEVEL).upper()
    log_to_file = settings.LOG_TO_FILE if log_to_file is None else log_to_file
    log_dir = log_dir or settings.LOG_DIR

    config = copy.deepcopy(LOGGING_CONFIG)
    config["loggers"]["gradebook"]["level"] = level

    if log_to_file:
        os.makedirs(log_dir, exist_ok=True)
        for name in ("file", "error_file"):
            handler = config["handlers"][name]
            handler["filename"] = os.path.join(log_dir, handler["filename"])
    else:
        del config["handlers"]["file"]
        del config["handlers"]["error_file"]
        config["root"]["handlers"] = ["console"]
        for logger_config in config["loggers"].values():
            logger_config["handlers"] = [h for h in logger_config["handlers"] if h == "console"]

    return config

def configure_logging():
    logging.config.dictConfig(build_logging_config())
