from __future__ import annotations

import uuid

from django.db import models
from django.utils import timezone

# 模型定义：管理员会话，令牌只在对应会话存在时有效


def generate_session_id() -> str:
    """会话标识：UUID4 的 32 位十六进制串"""
    return uuid.uuid4().hex


class AdminSession(models.Model):
    """
    管理员登录会话：
    - 每次登录创建一条，注销时删除
    - 签名令牌携带 session_id，认证时必须能在这里找到对应记录
    - 不单独记录过期时间，过期由令牌自身的 exp 声明决定
    """

    session_id = models.CharField("会话标识", max_length=64, unique=True, default=generate_session_id)
    created_at = models.DateTimeField("创建时间", default=timezone.now)
    user_agent = models.CharField("User-Agent", max_length=512, blank=True, default="")
    ip = models.GenericIPAddressField("来源 IP", null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["created_at"], name="admin_session_created_idx")]
        verbose_name = "管理员会话"
        verbose_name_plural = "管理员会话"

    def __str__(self) -> str:
        return self.session_id
