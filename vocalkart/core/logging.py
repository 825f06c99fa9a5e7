# vocalkart/core/logging.py
import logging
import sys
import colorlog

APP_LOGGER = "vocalkart"
# Third-party loggers kept at WARNING regardless of the app level
QUIET_LOGGERS = ("pymongo", "motor", "redis", "httpx", "httpcore", "openai")


def configure_logging(level=logging.INFO):
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s %(levelname)-8s%(reset)s %(blue)s[%(name)s]%(reset)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING if level < logging.WARNING else level)
    root_logger.handlers = [handler]

    # App modules and the server follow the requested level
    for name in (APP_LOGGER, "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
