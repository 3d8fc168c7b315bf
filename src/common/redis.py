"""Redis connection and identity-record helpers for the optional Redis backend."""

from __future__ import annotations

import os

import redis


_REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
_REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
_REDIS_DB = int(os.environ.get("REDIS_DB", "0"))
_REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD") or None

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return a shared Redis client (lazy singleton)."""
    global _client
    if _client is None:
        _client = redis.Redis(
            host=_REDIS_HOST,
            port=_REDIS_PORT,
            db=_REDIS_DB,
            password=_REDIS_PASSWORD,
            decode_responses=True,
        )
    return _client


# ── Agent identity record ────────────────────────────────────────────────────


def _key(agent_name: str, field: str) -> str:
    return f"agent:{agent_name}:{field}"


def load_agent_field(agent_name: str, field: str, client: redis.Redis | None = None) -> str | None:
    """Return one field of the agent's identity record, or None if unset."""
    return (client if client is not None else get_redis()).get(_key(agent_name, field))


def store_agent_field(
    agent_name: str, field: str, value: str, client: redis.Redis | None = None
) -> None:
    """Write one field of the agent's identity record."""
    (client if client is not None else get_redis()).set(_key(agent_name, field), value)
