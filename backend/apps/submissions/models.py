from __future__ import annotations

from django.db import models
from django.utils import timezone

# 模型定义：选手对谜题的答案提交，状态由管理员人工判定


class Submission(models.Model):
    """
    答案提交记录：
    - 关联谜题，记录选手姓名/邮箱/答案/备注
    - 同一选手可对同一谜题多次提交，入库时不去重
    - 状态只能由管理员显式修改，系统不自动判题
    """

    class Status(models.TextChoices):
        """提交判定状态"""
        PENDING = "pending", "待审核"
        CORRECT = "correct", "正确"
        INCORRECT = "incorrect", "错误"

    puzzle = models.ForeignKey("puzzles.Puzzle", verbose_name="谜题", related_name="submissions",
                               on_delete=models.CASCADE)
    # 选手姓名（已去除首尾空白）
    name = models.CharField("姓名", max_length=200)
    # 选手邮箱（已去空白并转小写），可为空
    email = models.CharField("邮箱", max_length=254, blank=True, default="")
    answer = models.TextField("答案")
    comments = models.TextField("备注", blank=True, default="")
    submitted_at = models.DateTimeField("提交时间", default=timezone.now)
    status = models.CharField("状态", max_length=20, choices=Status.choices, default=Status.PENDING)

    class Meta:
        ordering = ["-submitted_at", "-id"]
        indexes = [
            models.Index(fields=["puzzle", "submitted_at"], name="submission_puzzle_time_idx"),
            models.Index(fields=["email", "status"], name="submission_email_status_idx"),
            models.Index(fields=["status", "submitted_at"], name="submission_status_time_idx"),
        ]
        verbose_name = "答案提交"
        verbose_name_plural = "答案提交"

    def __str__(self) -> str:
        return f"{self.name} -> {self.puzzle_id} ({self.status})"
