"""
请求级上下文：一个 ContextVar 保存当前请求的元信息，供日志格式化器与异常处理器读取

中间件在请求开始时写入 request_id / method / path / ip / user_agent，
认证类成功后补上 session_id 与 admin_email，响应结束时清空。
"""

from __future__ import annotations

import contextvars
import uuid
from typing import Optional

CONTEXT_FIELDS = ("request_id", "session_id", "admin_email", "path", "method", "ip", "user_agent")

_current: contextvars.ContextVar[dict[str, str] | None] = contextvars.ContextVar("request_context", default=None)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


def set_request_context(*, request_id: Optional[str] = None, **values: str) -> None:
    unknown = set(values) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"未知的上下文字段: {sorted(unknown)}")
    ctx = {name: values.get(name) or "" for name in CONTEXT_FIELDS}
    ctx["request_id"] = request_id or generate_request_id()
    _current.set(ctx)


def clear_request_context() -> None:
    _current.set(None)


def get_request_context() -> dict[str, str]:
    """没有请求在处理时（Celery 任务、管理命令）返回全空字段"""
    ctx = _current.get()
    if ctx is None:
        return dict.fromkeys(CONTEXT_FIELDS, "")
    return dict(ctx)


def update_request_admin(admin) -> None:
    """DRF 认证发生在中间件之后，由认证类在成功时调用"""
    ctx = get_request_context()
    ctx["session_id"] = getattr(admin, "session_id", "") or ""
    ctx["admin_email"] = getattr(admin, "email", "") or ""
    ctx["request_id"] = ctx["request_id"] or generate_request_id()
    _current.set(ctx)


def get_client_ip(request) -> str:
    """优先取 X-Forwarded-For 的第一个地址，否则取 REMOTE_ADDR"""
    meta = getattr(request, "META", {}) or {}
    forwarded = meta.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return meta.get("REMOTE_ADDR", "") or ""
