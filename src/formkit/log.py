import logging.config

from .consts import LOG_BACKUP_COUNT, LOG_FILE, LOG_FORMAT, LOG_MAX_BYTES
from .utils import canonicalify, ensure_path


def logging_config(logfile: str = LOG_FILE, level: str = "INFO") -> dict:
    """dictConfig for the ``formkit`` logger tree.

    The console handler writes to stderr so commands that print JSON keep
    stdout machine readable. The rotating file always records DEBUG, which
    is where swallowed option resolution failures end up with tracebacks.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level.upper(),
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": logging.DEBUG,
                "formatter": "default",
                "filename": logfile,
                "maxBytes": LOG_MAX_BYTES,
                "backupCount": LOG_BACKUP_COUNT,
            },
        },
        "loggers": {
            "formkit": {
                "handlers": ["console", "file"],
                "level": logging.DEBUG,
                "propagate": True,
            }
        },
    }


def setup(logfile=None, level="INFO"):
    p = canonicalify(logfile or LOG_FILE)
    if len(p.parts) > 1:
        ensure_path(p.parent)

    logging.config.dictConfig(logging_config(str(p), level))


logger = logging.getLogger("formkit")
