"""
通用权限封装（apps.common.permissions）

职责：
- 公开接口与管理员接口两类权限
- 出错时统一抛出 BizError 子类（AuthError），由全局异常处理器统一包装为 401 响应
"""

from __future__ import annotations

from typing import Any

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from .exceptions import AuthError


class AllowAny(BasePermission):
    """
    允许任何请求通过（公开接口）
    """

    def has_permission(self, request: Request, view: Any) -> bool:  # noqa: D401
        return True


class IsAdminSession(BasePermission):
    """
    需要有效的管理员会话

    - 未携带令牌 → 401，提示先登录
    - 令牌无效/会话已注销的情况在认证阶段已抛出 TokenError
    """

    message = "请先以管理员身份登录"

    def has_permission(self, request: Request, view: Any) -> bool:
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            raise AuthError(message=self.message)
        return True
