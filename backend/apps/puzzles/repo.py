from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet
from django.utils import timezone

from apps.common.base.base_repo import BaseRepo
from apps.common.exceptions import PuzzleNotFoundError

from .models import Puzzle


# 仓储层：封装谜题的查询与写入


class PuzzleRepo(BaseRepo[Puzzle]):
    """谜题仓储：按创建时间倒序，提供 slug 占用检查与当前活动谜题查询"""

    model = Puzzle
    not_found = PuzzleNotFoundError

    def get_queryset(self) -> QuerySet[Puzzle]:
        return super().get_queryset().order_by("-created_at", "-id")

    def slug_taken(self, slug: str, *, exclude_id: Optional[int] = None) -> bool:
        qs = self.filter(slug=slug)
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    def latest_active(self) -> Optional[Puzzle]:
        """最近创建、仍在截止时间内且已启用的谜题"""
        return self.filter(is_active=True, deadline__gt=timezone.now()).first()

    def referenced_files(self) -> set[str]:
        """所有谜题当前引用的附件路径"""
        paths: set[str] = set()
        for file_path, solution_file_path in self.get_queryset().values_list("file_path", "solution_file_path"):
            if file_path:
                paths.add(file_path)
            if solution_file_path:
                paths.add(solution_file_path)
        return paths
