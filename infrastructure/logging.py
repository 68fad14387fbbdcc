import logging
import logging.handlers
import sys

import structlog

from infrastructure.config import Settings, settings

# Third-party loggers that are chatty at INFO (HTTP requests per embedding, model downloads)
_NOISY_LOGGERS = ("httpx", "openai", "sentence_transformers", "pymongo")

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _renderer(config: Settings):
    if config.app_env == "development":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def _handlers(config: Settings) -> list[logging.Handler]:
    config.log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.TimedRotatingFileHandler(
        config.log_dir / f"{config.app_env}.log",
        when="midnight",
        interval=1,
        backupCount=7,
    )
    return [logging.StreamHandler(sys.stdout), file_handler]


def setup_logging(config: Settings | None = None) -> None:
    """Configure structlog and route standard library records through the same renderer.

    Records from structlog and from libraries using the stdlib logging module
    end up in the same stdout stream and daily-rotated file
    (``<log_dir>/<app_env>.log``, seven days kept).
    """
    config = config or settings

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processor=_renderer(config),
    )

    root_logger = logging.getLogger()
    for handler in _handlers(config):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(config.log_level.upper())

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    structlog.contextvars.bind_contextvars(app=config.app_name)
