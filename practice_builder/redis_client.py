"""Shared async Redis connection for builder drafts.

One client per URL is kept for the life of the process. Every ``DraftStore``
and the HTTP dependency reuse it, so drafts written by one request are read
back by the next.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import redis.asyncio as redis

from practice_builder.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def create_redis_client(url: str | None = None) -> redis.Redis | None:
    """Connection for draft records, or ``None`` when drafts stay in memory.

    ``url`` overrides ``REDIS_URL``. An empty setting or a URL that cannot be
    parsed yields ``None``.
    """

    redis_url = url or settings.REDIS_URL
    if not redis_url:
        logger.warning("REDIS_URL is empty; builder drafts are kept in process memory only")
        return None

    try:
        return redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
    except ValueError as exc:
        logger.warning("Invalid REDIS_URL for builder drafts: %s", exc)
        return None
