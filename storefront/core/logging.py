"""
Structured logging configuration using structlog.

In development (app_env=dev): colored console output.
Elsewhere: one JSON object per line with timestamp, level, logger name and
every bound context var.

Modules keep using stdlib loggers; their records pass through the same
processor chain, so context bound with structlog shows up on them too:

    logger = logging.getLogger(__name__)
    logger.info("Analytics tracked: %s for product %s", event_type, product_id)

ScoringService.track_event binds ``session_id`` and ``product_id`` while an
event is being recorded, so the event log line, the score update and any
failure can be joined on the tracking session:

    {"event": "Analytics tracked: hover_2s for product 42",
     "session_id": "session_1718000000000_k3j9x0a1b", "product_id": "42", ...}
"""

import logging
import sys

import structlog

# Chatty at INFO while loading or downloading the similarity model
_NOISY_LOGGERS = ("uvicorn.access", "sentence_transformers", "huggingface_hub", "urllib3")


def configure_logging(app_env: str = "dev") -> None:
    """
    Route stdlib and structlog loggers through one structlog renderer.

    Args:
        app_env: "dev" renders for the console; anything else renders JSON.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if app_env == "dev":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.INFO)

    if app_env != "dev":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
