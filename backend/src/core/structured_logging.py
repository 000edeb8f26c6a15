"""Small structured logging helper.

Every log line is a single JSON object so upload and link events can be
queried by any log collector.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from src.core.request_context import get_actor_id, get_request_id


def log_json(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """Emit a single JSON log line with request and actor correlation."""

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event": event,
    }
    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id
    actor_id = get_actor_id()
    if actor_id:
        payload["actor_id"] = actor_id

    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str))
