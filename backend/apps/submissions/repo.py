from __future__ import annotations

from django.db.models import QuerySet

from apps.common.base.base_repo import BaseRepo
from apps.common.exceptions import SubmissionNotFoundError

from .models import Submission


# 仓储层：封装提交记录的查询与写入


class SubmissionRepo(BaseRepo[Submission]):
    """提交仓储：默认按提交时间倒序，提供按谜题/状态的常用查询"""

    model = Submission
    not_found = SubmissionNotFoundError

    def get_queryset(self) -> QuerySet[Submission]:
        return super().get_queryset().order_by("-submitted_at", "-id")

    def list_with_puzzle(self) -> QuerySet[Submission]:
        """全部提交（带谜题标题），减少后续访问 N+1"""
        return self.get_queryset().select_related("puzzle")

    def list_for_puzzle(self, puzzle_id: int) -> QuerySet[Submission]:
        return self.filter(puzzle_id=puzzle_id)

    def correct_rows(self, *, puzzle_id: int | None = None) -> QuerySet:
        """
        正确提交的精简行，按提交时间升序（同一时间按 ID）
        排行榜与正确选手列表都基于这个顺序做“首个出现者优先”的聚合
        """
        qs = self.model._default_manager.filter(status=Submission.Status.CORRECT)
        if puzzle_id is not None:
            qs = qs.filter(puzzle_id=puzzle_id)
        return qs.order_by("submitted_at", "id").values("puzzle_id", "name", "email", "submitted_at")
