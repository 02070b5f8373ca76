# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""structlog setup shared by the API process and its background jobs.

Modules log through ``logging.getLogger(__name__)`` with %-style
arguments. Their records pass through a structlog ProcessorFormatter
that renders colored console lines in development or debug mode and
one JSON object per line elsewhere. Request-scoped fields such as
user_id are carried in structlog contextvars.
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from scholaris.core.config.settings import Settings

NOISY_LOGGERS: tuple[str, ...] = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "sqlalchemy",
    "asyncio",
    "apscheduler",
    "LiteLLM",
    "litellm",
)


def _renderer(settings: "Settings", chain: list[Processor]) -> Processor:
    if settings.is_development or settings.debug:
        return structlog.dev.ConsoleRenderer(colors=True)
    chain.append(structlog.processors.format_exc_info)
    return structlog.processors.JSONRenderer()


def setup_logging(settings: "Settings") -> None:
    """Install the structlog pipeline on the root logger.

    Third-party libraries listed in NOISY_LOGGERS are capped at WARNING
    while the ``scholaris`` hierarchy follows settings.log_level.

    Args:
        settings: Supplies log_level and the development/debug flags.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = _renderer(settings, chain)

    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("scholaris").setLevel(level)


def bind_context(**kwargs: object) -> None:
    """Attach fields to every record logged later in this context.

    Example:
        >>> bind_context(user_id="u-42", role="teacher")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all bound fields; called as each request starts."""
    structlog.contextvars.clear_contextvars()
