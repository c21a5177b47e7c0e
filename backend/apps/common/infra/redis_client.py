"""
Redis 缓存访问（只存可丢弃的数据，目前是排行榜）

REDIS_ENABLED 关闭（测试环境）或 Redis 出错时，读取返回 None、写入/删除被跳过，
调用方据此回退到数据库计算。
"""

from __future__ import annotations

import json
from typing import Any, Callable, Optional, TypeVar

import redis
from django.conf import settings

from apps.common.infra.logger import get_logger, logger_extra

_logger = get_logger(__name__)

_client: Optional[redis.Redis] = None

R = TypeVar("R")


def _get_client() -> Optional[redis.Redis]:
    global _client
    if not getattr(settings, "REDIS_ENABLED", True):
        return None
    if _client is None:
        # 连接在首次命令时建立
        _client = redis.Redis(
            host=settings.REDIS_HOST,
            port=int(settings.REDIS_PORT),
            db=int(settings.REDIS_DB_CACHE),
            password=settings.REDIS_PASSWORD or None,
            decode_responses=True,
            socket_connect_timeout=float(getattr(settings, "REDIS_CONNECT_TIMEOUT", 0.2)),
            socket_timeout=float(getattr(settings, "REDIS_SOCKET_TIMEOUT", 0.5)),
        )
    return _client


def _run(action: str, key: str, command: Callable[[redis.Redis], R]) -> Optional[R]:
    client = _get_client()
    if client is None:
        return None
    try:
        return command(client)
    except redis.RedisError:
        _logger.warning(f"Redis {action}失败，已跳过", extra=logger_extra({"key": key}), exc_info=True)
        return None


def set(key: str, value: Any, ex: Optional[int] = None) -> None:
    _run("写入", key, lambda client: client.set(key, value, ex=ex))


def get(key: str) -> Optional[str]:
    return _run("读取", key, lambda client: client.get(key))


def delete(key: str) -> None:
    _run("删除", key, lambda client: client.delete(key))


def set_json(key: str, data: Any, ex: Optional[int] = None) -> None:
    set(key, json.dumps(data, ensure_ascii=False), ex=ex)


def get_json(key: str) -> Optional[Any]:
    """缓存内容损坏时按未命中处理"""
    raw = get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        _logger.warning("Redis 缓存内容无法解析，已忽略", extra=logger_extra({"key": key}))
        return None
