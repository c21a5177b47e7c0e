"""
管理员登录限速：按客户端 IP 计数，速率取 DEFAULT_THROTTLE_RATES["admin_login"]

超限时直接抛 RateLimitError（42900），extra.wait 为建议等待秒数。
"""

from __future__ import annotations

import math
from typing import Optional

from rest_framework.throttling import SimpleRateThrottle

from apps.common.infra.logger import get_logger, logger_extra

from .exceptions import RateLimitError

logger = get_logger(__name__)


class LoginRateThrottle(SimpleRateThrottle):
    scope = "admin_login"

    def get_cache_key(self, request, view) -> Optional[str]:
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}

    def throttle_failure(self):
        wait = self.wait()
        wait_seconds = math.ceil(wait) if wait is not None else None
        logger.warning("管理员登录触发限速", extra=logger_extra({"throttle_key": self.key, "wait": wait_seconds}))
        raise RateLimitError(message="登录请求过于频繁，请稍后再试", extra={"wait": wait_seconds})
