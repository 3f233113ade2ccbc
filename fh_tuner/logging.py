"""Structured logging setup for the tuning engine.

Engine modules only ever call ``structlog.get_logger(__name__)``; entry
points (the CLI and the dashboard) call :func:`setup_logging` once.

Community tunes carry an author handle.  Handles never reach the log
output: :func:`_mask_community_fields` swaps them for a short stable digest
(so one author's submissions can still be grouped) and collapses whole
:class:`TuneDataPoint` records to their id and car.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from typing import Any, MutableMapping

import structlog

from fh_tuner.core.patterns import TuneDataPoint

# Event keys holding a community author handle.
_HANDLE_KEYS: frozenset[str] = frozenset({"submitted_by", "author", "user"})

_HANDLE_DIGEST_SIZE: int = 4


def mask_handle(handle: str) -> str:
    """Stable, non-reversible label for an author handle.

    Empty handles stay empty.  Case and surrounding whitespace are ignored,
    so ``"Kai"`` and ``" kai "`` map to the same label.
    """
    normalized = handle.strip().lower()
    if not normalized:
        return ""
    digest = hashlib.blake2s(normalized.encode("utf-8"), digest_size=_HANDLE_DIGEST_SIZE)
    return f"author-{digest.hexdigest()}"


def _mask_value(key: str, value: Any) -> Any:
    if isinstance(value, TuneDataPoint):
        return f"{value.id} ({value.car_name})"
    if key.lower() in _HANDLE_KEYS and isinstance(value, str):
        return mask_handle(value)
    if isinstance(value, dict):
        return {k: _mask_value(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple)) and any(isinstance(v, TuneDataPoint) for v in value):
        return [_mask_value(key, v) for v in value]
    return value


def _mask_community_fields(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask author handles and collapse community records, nested dicts included."""
    for key in list(event_dict):
        if key != "event":
            event_dict[key] = _mask_value(key, event_dict[key])
    return event_dict


def setup_logging(env: str = "development", level: int = logging.INFO) -> None:
    """Configure structlog for the given environment.

    Args:
        env: ``"local"`` or ``"development"`` render coloured console
            output; anything else renders one JSON object per line.
        level: Standard-library logging level for the root handler.
    """
    processors: list[Any] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        _mask_community_fields,
    ]

    if env in ("local", "development"):
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
