"""管理员会话的业务逻辑：登录颁发令牌、注销吊销会话"""

from __future__ import annotations

import hmac
import ipaddress

from django.conf import settings

from apps.common.base.base_service import BaseService
from apps.common.exceptions import InvalidCredentialsError
from apps.common.infra.jwt_provider import issue_admin_token
from apps.common.infra.logger import get_logger, logger_extra

from .repo import AdminSessionRepo
from .schemas import AdminLoginSchema

logger = get_logger(__name__)


def _clean_ip(ip: str) -> str | None:
    """只保存合法的 IP 地址"""
    try:
        return str(ipaddress.ip_address((ip or "").strip()))
    except ValueError:
        return None


def _matches(given: str, expected: str) -> bool:
    """常量时间比较，未配置的凭据永远不匹配"""
    if not expected:
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


class AdminLoginService(BaseService[dict[str, str]]):
    """
    管理员登录：
    - 与配置中唯一的 ADMIN_EMAIL / ADMIN_PASSWORD 比较
    - 匹配则新建会话并颁发携带 session_id/email 的 24 小时令牌
    """

    def __init__(self, session_repo: AdminSessionRepo | None = None):
        self.session_repo = session_repo or AdminSessionRepo()

    def perform(self, schema: AdminLoginSchema, *, user_agent: str = "", ip: str = "") -> dict[str, str]:
        email_ok = _matches(schema.email, getattr(settings, "ADMIN_EMAIL", ""))
        password_ok = _matches(schema.password, getattr(settings, "ADMIN_PASSWORD", ""))
        if not (email_ok and password_ok):
            logger.warning(
                "管理员登录失败：凭据错误",
                extra=logger_extra({"email": schema.email, "ip": ip}),
            )
            raise InvalidCredentialsError()

        session = self.session_repo.create(
            {
                "user_agent": (user_agent or "")[:512],
                "ip": _clean_ip(ip),
            }
        )
        token = issue_admin_token(session_id=session.session_id, email=schema.email)
        logger.info(
            "管理员登录成功",
            extra=logger_extra({"session_id": session.session_id, "ip": ip}),
        )
        return {"token": token}


class AdminLogoutService(BaseService[None]):
    """注销：删除会话记录，令牌随即失效"""

    def __init__(self, session_repo: AdminSessionRepo | None = None):
        self.session_repo = session_repo or AdminSessionRepo()

    def perform(self, session_id: str) -> None:
        deleted = self.session_repo.delete_by_session_id(session_id)
        logger.info("管理员已注销", extra=logger_extra({"session_id": session_id, "deleted": deleted}))
        return None
