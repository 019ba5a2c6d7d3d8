import logging
import logging.config


def setup_logging(level: str = "INFO") -> None:
    """
    Console logging for the app and werkzeug. Safe to call more than once.
    """
    level = (level or "INFO").upper()
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
            },
        },
        "loggers": {
            "": {  # Root logger
                "handlers": ["console"],
                "level": "WARNING",
            },
            "werkzeug": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
            "teamroles": {  # Application logger
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)
