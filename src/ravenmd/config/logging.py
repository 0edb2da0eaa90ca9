"""structlog setup for the ravenmd CLI.

Library modules log through ``logging.getLogger(__name__)``; this module
renders those records (and any structlog loggers) on stderr, either as a
console line or, with ``--log-json``, as one JSON object per line.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

PACKAGE_LOGGER = "ravenmd"

# Libraries whose DEBUG chatter would drown out ours under -v.
QUIET_LOGGERS = ("markdown_it", "ruamel")

_HANDLER_NAME = "ravenmd-stderr"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _render_chain(*, log_json: bool, stream: TextIO) -> list[structlog.types.Processor]:
    if log_json:
        return [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=stream.isatty()),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Install the ravenmd stderr handler on the root logger.

    Calling again replaces the handler installed by an earlier call and
    leaves any other root handlers in place.

    Args:
        verbose: DEBUG for ``ravenmd.*`` loggers; WARNING otherwise.
        log_json: Emit JSON lines instead of console lines.
        stream: Destination; defaults to the current ``sys.stderr``.
    """
    out = stream if stream is not None else sys.stderr

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(out)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=_render_chain(log_json=log_json, stream=out),
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
