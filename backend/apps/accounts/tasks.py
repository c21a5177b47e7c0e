from __future__ import annotations

from celery import shared_task
from django.utils import timezone

from apps.common.infra.jwt_provider import token_lifetime
from apps.common.infra.logger import get_logger, logger_extra

from .repo import AdminSessionRepo

logger = get_logger(__name__)


@shared_task(name="apps.accounts.tasks.purge_stale_admin_sessions")
def purge_stale_admin_sessions() -> int:
    """
    Celery 定时任务：删除创建时间早于令牌有效期的会话
    这些会话对应的令牌已无法通过签名/过期校验，保留只会占用空间
    """
    cutoff = timezone.now() - token_lifetime()
    deleted = AdminSessionRepo().delete_created_before(cutoff)
    logger.info("过期管理员会话清理完成", extra=logger_extra({"deleted": deleted}))
    return deleted
