"""
JWT 工具封装：为管理员会话颁发与校验访问令牌

- 依赖 SimpleJWT 的 AccessToken，签名算法/密钥来自 SIMPLE_JWT（HS256 + JWT_SECRET）
- 令牌只承载 session_id 与 email 两个业务声明，有效期 24 小时
- 是否仍然有效还取决于 AdminSession 记录是否存在（由认证类负责检查）
"""

from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from rest_framework_simplejwt.tokens import AccessToken, TokenError as SimpleJWTError

from apps.common.exceptions import AuthError, TokenError

SESSION_CLAIM = "session_id"
EMAIL_CLAIM = "email"


def token_lifetime() -> timedelta:
    """管理员令牌有效期，默认 24 小时"""
    return settings.SIMPLE_JWT.get("ACCESS_TOKEN_LIFETIME", timedelta(hours=24))


def issue_admin_token(*, session_id: str, email: str) -> str:
    """
    为管理员会话颁发签名令牌
    """
    try:
        token = AccessToken()
        token.set_exp(lifetime=token_lifetime())
        token[SESSION_CLAIM] = session_id
        token[EMAIL_CLAIM] = email
    except SimpleJWTError as exc:  # pragma: no cover - SimpleJWT 内部异常
        raise AuthError(message="颁发令牌失败") from exc
    return str(token)


def verify_admin_token(raw_token: str) -> AccessToken:
    """
    校验签名与过期时间，并确认令牌携带会话标识；失败抛 TokenError
    """
    try:
        token = AccessToken(raw_token)
    except SimpleJWTError as exc:
        raise TokenError(message="令牌无效或已过期，请重新登录") from exc
    if not token.get(SESSION_CLAIM):
        raise TokenError(message="令牌缺少会话信息")
    return token
