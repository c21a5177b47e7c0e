"""管理员会话的数据访问层"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from apps.common.base.base_repo import BaseRepo

from .models import AdminSession


class AdminSessionRepo(BaseRepo[AdminSession]):
    """
    管理员会话仓储：
    - 登录时创建，注销时按 session_id 删除
    - 认证类按 session_id 确认会话仍然存在
    """

    model = AdminSession

    def get_by_session_id(self, session_id: str) -> Optional[AdminSession]:
        if not session_id:
            return None
        return self.get_or_none(session_id=session_id)

    def delete_by_session_id(self, session_id: str) -> int:
        """删除会话，返回删除条数（会话不存在时为 0）"""
        deleted, _ = self.filter(session_id=session_id).delete()
        return deleted

    def delete_created_before(self, cutoff: datetime) -> int:
        """清理早于 cutoff 创建的会话，这些会话对应的令牌已过期"""
        deleted, _ = self.filter(created_at__lt=cutoff).delete()
        return deleted
