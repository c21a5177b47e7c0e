"""
管理员会话认证（apps.common.authentication）

职责与目标：
- 全局认证入口：从 Authorization: Bearer <token> 读取管理员令牌
- 令牌签名/过期由 SimpleJWT 校验；令牌内的 session_id 必须对应一条仍存在的 AdminSession
- 注销（删除会话记录）后，即使令牌尚未过期也立即失效
- 认证失败统一抛 TokenError(40102)，交由全局异常处理器格式化

默认行为：
- 未携带凭证 → 返回 None（匿名，由权限类决定是否放行）
- 凭证格式错误 / 签名错误 / 已过期 / 会话已注销 → TokenError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from rest_framework.request import Request
from rest_framework_simplejwt.authentication import (
    JWTAuthentication as SimpleJWTAuthentication,
)
from rest_framework_simplejwt.exceptions import AuthenticationFailed as SimpleJWTAuthFailed

from .exceptions import TokenError
from .infra.jwt_provider import EMAIL_CLAIM, SESSION_CLAIM, verify_admin_token
from .infra.logger import get_logger, logger_extra
from .utils.request_context import update_request_admin

logger = get_logger(__name__)


@dataclass(frozen=True)
class AdminPrincipal:
    """
    已认证的管理员身份

    系统只有一个由配置决定的管理员，不落用户表；
    DRF 需要的 is_authenticated 等属性在这里直接给出。
    """

    email: str
    session_id: str

    is_authenticated = True
    is_anonymous = False
    is_active = True
    is_staff = True

    @property
    def pk(self) -> str:
        # 限速等组件需要稳定标识，使用会话 ID
        return self.session_id


class AdminSessionAuthentication(SimpleJWTAuthentication):
    """
    基于 SimpleJWT 的会话型认证

    与 SimpleJWT 默认行为的区别：
    - 不查询 Django User，而是查询 AdminSession
    - 所有失败统一映射为 TokenError，而不是 DRF 的 AuthenticationFailed
    """

    def authenticate(self, request: Request) -> Optional[tuple[Any, Any]]:
        header = self.get_header(request)
        if header is None:
            return None

        try:
            raw_token = self.get_raw_token(header)
        except SimpleJWTAuthFailed as exc:
            # Authorization 头由多段组成等格式问题
            logger.warning("认证失败：Authorization 头格式错误", extra=logger_extra({"reason": "bad_header"}))
            raise TokenError(message="认证信息格式错误") from exc
        if raw_token is None:
            return None

        if isinstance(raw_token, bytes):
            raw_token = raw_token.decode("utf-8", errors="ignore")
        try:
            validated_token = verify_admin_token(raw_token)
        except TokenError:
            logger.warning("认证失败：无效或过期的令牌", extra=logger_extra({"reason": "invalid_token"}))
            raise

        admin = self.get_user(validated_token)

        # 认证成功后补充请求上下文，后续日志可带上会话标识
        update_request_admin(admin)
        return admin, validated_token

    def get_user(self, validated_token) -> AdminPrincipal:
        """
        令牌中的 session_id 必须仍有对应的 AdminSession 记录
        """
        from apps.accounts.repo import AdminSessionRepo

        session_id = str(validated_token.get(SESSION_CLAIM, ""))
        session = AdminSessionRepo().get_by_session_id(session_id)
        if session is None:
            logger.warning(
                "认证失败：会话不存在或已注销",
                extra=logger_extra({"session_id": session_id}),
            )
            raise TokenError(message="会话已注销，请重新登录")
        return AdminPrincipal(
            email=str(validated_token.get(EMAIL_CLAIM, "")),
            session_id=session.session_id,
        )
