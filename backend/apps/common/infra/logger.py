"""
日志：LOG_PATH/server.log，每天午夜轮转，保留 30 天

每条日志附带当前请求上下文（request_id、管理员、ip、path）以及调用方传入的 extra。
LOG_FORMAT=json 输出单行 JSON，否则输出纯文本；DEBUG 时同时输出到控制台。

    logger = get_logger(__name__)
    logger.info("谜题已创建", extra=logger_extra({"puzzle_id": puzzle.id}))
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from django.conf import settings as django_settings

_configured = False

# 日志中需要打码的字段：密码、令牌与选手答案
SENSITIVE_KEYS = {"password", "token", "answer", "secret", "authorization"}

# LogRecord 自带的属性，剩下的才是 extra
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")


def _request_context() -> dict[str, str]:
    from apps.common.utils.request_context import get_request_context

    return get_request_context()


class JSONContextFormatter(logging.Formatter):
    """
    {"timestamp": "2026-10-19 09:30:00", "level": "INFO", "logger": "apps.submissions.services",
     "message": "收到答案提交", "request_id": "3f2a9c1d0b7e", "ip_address": "127.0.0.1", "puzzle_id": 3}
    """

    _CONTEXT_KEYS = (
        ("request_id", "request_id"),
        ("session_id", "session_id"),
        ("admin_email", "admin"),
        ("ip", "ip_address"),
        ("path", "request_path"),
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        ctx = _request_context()
        for source, target in self._CONTEXT_KEYS:
            if ctx.get(source):
                entry[target] = ctx[source]
        for key, value in _record_extra(record).items():
            entry.setdefault(key, value)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class PlainContextFormatter(logging.Formatter):
    """
    2026-10-19 09:30:00 INFO apps.accounts.services 管理员登录成功 [admin@example.com|3f2a9c1d0b7e|127.0.0.1|/api/admin/login] session_id=9b1e...
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = _request_context()
        tag = "|".join(ctx.get(key) or "-" for key in ("admin_email", "request_id", "ip", "path"))
        line = f"{_timestamp(record)} {record.levelname} {record.name} {record.getMessage()} [{tag}]"
        extra = _record_extra(record)
        if extra:
            line += " " + " ".join(f"{key}={value}" for key, value in extra.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_log_path_from_settings() -> str:
    log_dir = Path(getattr(django_settings, "LOG_PATH", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return str(log_dir / "server.log")


def configure_logging(force: bool = False, *, level: Optional[int] = None, log_file_path: Optional[str] = None) -> None:
    """替换 root logger 的 handlers；force=False 时只配置一次"""
    global _configured
    if _configured and not force:
        return

    if level is None:
        level = logging.getLevelName(str(getattr(django_settings, "LOG_LEVEL", "INFO")).upper())
        if not isinstance(level, int):
            level = logging.INFO

    if str(getattr(django_settings, "LOG_FORMAT", "plain")).lower() == "json":
        formatter: logging.Formatter = JSONContextFormatter()
    else:
        formatter = PlainContextFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_file_path or get_log_path_from_settings(),
        when="midnight",
        backupCount=30,
        encoding="utf-8",
        delay=True,
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if getattr(django_settings, "DEBUG", False):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


def sanitize_extra(extra: Optional[dict] = None) -> dict:
    """打码敏感字段（大小写不敏感），其余原样保留"""
    if not extra:
        return {}
    return {key: ("***" if key.lower() in SENSITIVE_KEYS else value) for key, value in extra.items()}


def logger_extra(extra: Optional[dict] = None) -> dict:
    return sanitize_extra(extra)
