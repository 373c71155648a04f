import hashlib
import json
import logging
from typing import Any, Optional, Tuple

from fastapi import Request
from pydantic import BaseModel
from redis.asyncio import Redis
from redis.exceptions import RedisError

from seat_booking.core.config import settings
from seat_booking.exceptions import IdempotencyConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "X-Idempotency-Key"


def _redis_key(scope: str, idem_key: str) -> str:
    return f"idempotency:{scope}:{idem_key}"


def compute_request_hash(request_data: dict) -> str:
    serialized = json.dumps(request_data, sort_keys=True)
    return hashlib.sha256(serialized.encode()).hexdigest()


async def check_idempotency(request: Request, redis: Redis, scope: str, request_hash: str) -> Tuple[Optional[str], Optional[Any], bool]:
    """
    Returns (key, cached_response, is_repeat).
    The header is optional: without it every request is processed.
    A key reused with a different request body is rejected.
    """
    idem_key = request.headers.get(IDEMPOTENCY_HEADER)
    if not idem_key:
        return None, None, False
    try:
        cached = await redis.get(_redis_key(scope, idem_key))
    except RedisError as e:
        logger.error(f"failed to read idempotency key {idem_key}: {e}", exc_info=True)
        raise StoreUnavailableError("idempotency store unavailable") from e
    if not cached:
        return idem_key, None, False
    entry = json.loads(cached)
    if entry["request_hash"] != request_hash:
        logger.warning(f"idempotency key {idem_key} reused with a different request")
        raise IdempotencyConflictError()
    logger.info(f"replaying response for idempotency key {idem_key}")
    return idem_key, entry["response"], True


async def save_idempotent_response(redis: Redis, scope: str, idem_key: Optional[str], request_hash: str, response: BaseModel) -> None:
    if not idem_key:
        return
    entry = {"request_hash": request_hash, "response": response.model_dump(mode="json")}
    try:
        await redis.set(
            _redis_key(scope, idem_key),
            json.dumps(entry),
            ex=settings.IDEMPOTENCY_TTL_SECONDS)
    except RedisError as e:
        # the booking itself is committed, only the replay protection is lost
        logger.error(f"failed to save idempotency key {idem_key}: {e}", exc_info=True)
