from __future__ import annotations

from django.db import transaction
from django.utils import timezone

from apps.common.base.base_service import BaseService
from apps.common.exceptions import DeadlinePassedError, require
from apps.common.infra.logger import get_logger, logger_extra
from apps.leaderboard.services import invalidate_leaderboard_cache
from apps.puzzles.repo import PuzzleRepo

from .models import Submission
from .repo import SubmissionRepo
from .schemas import SubmissionCreateSchema, SubmissionStatusSchema

# 服务层：接收答案提交，管理员审核/删除提交

logger = get_logger(__name__)


def serialize_submission(submission: Submission, *, with_puzzle_title: bool = False) -> dict:
    """提交记录序列化：管理员列表额外带上谜题标题"""
    payload = {
        "id": submission.id,
        "puzzle_id": submission.puzzle_id,
        "name": submission.name,
        "email": submission.email,
        "answer": submission.answer,
        "comments": submission.comments,
        "submitted_at": submission.submitted_at,
        "status": submission.status,
    }
    if with_puzzle_title:
        payload["puzzle_title"] = getattr(submission.puzzle, "title", None)
    return payload


class SubmissionCreateService(BaseService[Submission]):
    """
    答案提交服务：
    - 谜题必须存在，且截止时间严格晚于当前时间
    - 新提交一律为 pending，不做重复提交过滤
    """

    def __init__(self, puzzle_repo: PuzzleRepo | None = None, submission_repo: SubmissionRepo | None = None):
        self.puzzle_repo = puzzle_repo or PuzzleRepo()
        self.submission_repo = submission_repo or SubmissionRepo()

    def perform(self, schema: SubmissionCreateSchema) -> Submission:
        puzzle = self.puzzle_repo.get_by_id(schema.puzzle_id)
        now = timezone.now()
        require(puzzle.is_open(now), DeadlinePassedError())
        submission = self.submission_repo.create(
            {
                "puzzle": puzzle,
                "name": schema.name,
                "email": schema.email,
                "answer": schema.answer,
                "comments": schema.comments,
                "submitted_at": now,
                "status": Submission.Status.PENDING,
            }
        )
        logger.info(
            "收到答案提交",
            extra=logger_extra(
                {
                    "submission_id": submission.id,
                    "puzzle_id": puzzle.id,
                    "answer_length": len(submission.answer),
                }
            ),
        )
        return submission


class SubmissionListService(BaseService[list[Submission]]):
    """
    提交列表：
    - 全部提交（管理员，带谜题标题），按提交时间倒序
    - 单个谜题的提交；require_puzzle=True 时谜题不存在抛 404
    """

    atomic_enabled = False

    def __init__(self, puzzle_repo: PuzzleRepo | None = None, submission_repo: SubmissionRepo | None = None):
        self.puzzle_repo = puzzle_repo or PuzzleRepo()
        self.submission_repo = submission_repo or SubmissionRepo()

    def perform(self) -> list[Submission]:
        return list(self.submission_repo.list_with_puzzle())

    def for_puzzle(self, puzzle_id: int, *, require_puzzle: bool = False) -> list[Submission]:
        if require_puzzle:
            self.puzzle_repo.get_by_id(puzzle_id)
        return list(self.submission_repo.list_for_puzzle(puzzle_id))


class SubmissionStatusService(BaseService[Submission]):
    """
    管理员修改提交状态：
    - 可以在三种状态之间任意切换（包括改回 pending）
    - 提交后使排行榜缓存失效
    """

    def __init__(self, submission_repo: SubmissionRepo | None = None):
        self.submission_repo = submission_repo or SubmissionRepo()

    def perform(self, submission_id: int, schema: SubmissionStatusSchema) -> Submission:
        submission = self.submission_repo.get_by_id(submission_id)
        previous = submission.status
        if previous != schema.status:
            submission = self.submission_repo.update(submission, {"status": schema.status})
            transaction.on_commit(invalidate_leaderboard_cache)
        logger.info(
            "提交状态已更新",
            extra=logger_extra(
                {
                    "submission_id": submission.id,
                    "puzzle_id": submission.puzzle_id,
                    "from": previous,
                    "to": submission.status,
                }
            ),
        )
        return submission


class SubmissionDeleteService(BaseService[None]):
    """管理员删除提交，提交后使排行榜缓存失效"""

    def __init__(self, submission_repo: SubmissionRepo | None = None):
        self.submission_repo = submission_repo or SubmissionRepo()

    def perform(self, submission_id: int) -> None:
        submission = self.submission_repo.get_by_id(submission_id)
        self.submission_repo.delete(submission)
        transaction.on_commit(invalidate_leaderboard_cache)
        logger.info("提交已删除", extra=logger_extra({"submission_id": submission_id}))
        return None
