"""Uploader identity resolution.

Uploads do not require authentication. When no user is signed in, the
upload is attributed to a synthetic identity that is minted per request and
never reused, so ``uploaded_by`` on such records does not identify anyone.
The ``anonymous`` flag is stored next to it to keep that visible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID, uuid4

from src.core.request_context import set_actor_id
from src.core.structured_logging import log_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Uploader:
    """The identity an attachment is recorded against."""

    user_id: UUID
    anonymous: bool


def anonymous_uploader() -> Uploader:
    """Mint a synthetic, non-reusable identity for an unauthenticated upload."""
    uploader = Uploader(user_id=uuid4(), anonymous=True)
    log_json(
        logger,
        logging.INFO,
        "anonymous_uploader_minted",
        synthetic_user_id=str(uploader.user_id),
    )
    return uploader


def resolve_uploader(user_id: UUID | None) -> Uploader:
    """Resolve the uploader from an optional authenticated user id.

    The resolved id is also bound to the request log context.
    """
    if user_id is not None:
        uploader = Uploader(user_id=user_id, anonymous=False)
    else:
        uploader = anonymous_uploader()
    set_actor_id(str(uploader.user_id))
    return uploader
