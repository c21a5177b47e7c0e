from __future__ import annotations

from django.conf import settings

from apps.common.base.base_service import BaseService
from apps.common.infra import redis_client
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.utils.redis_keys import leaderboard_key
from apps.puzzles.repo import PuzzleRepo
from apps.submissions.repo import SubmissionRepo

# 服务层：排行榜与“答对选手”列表，均为基于正确提交的只读聚合

logger = get_logger(__name__)


def normalize_solver_name(name: str) -> str:
    """去首尾空白、转小写、连续空白压缩为一个空格"""
    return " ".join((name or "").strip().lower().split())


def invalidate_leaderboard_cache() -> None:
    """提交状态变化、提交删除、谜题删除后调用，下次请求重新计算"""
    redis_client.delete(leaderboard_key())


class LeaderboardService(BaseService[list[dict]]):
    """
    排行榜服务：
    - 同一选手（按姓名）同一谜题的多次正确提交只计一次，保留最早一次
    - 再按姓名汇总，统计答对的不同谜题数，最早一次答对时间用于同分排序
    - 排序：答对题数降序 -> 首次答对时间升序 -> 姓名升序，取前 LEADERBOARD_LIMIT 名
    - 结果短暂缓存到 Redis，Redis 不可用时直接重新计算
    """

    atomic_enabled = False

    def __init__(self, submission_repo: SubmissionRepo | None = None):
        self.submission_repo = submission_repo or SubmissionRepo()

    @property
    def cache_ttl_seconds(self) -> int:
        return int(getattr(settings, "LEADERBOARD_CACHE_TTL", 30))

    @property
    def limit(self) -> int:
        return int(getattr(settings, "LEADERBOARD_LIMIT", 100))

    def perform(self) -> list[dict]:
        cache_key = leaderboard_key()
        cached = redis_client.get_json(cache_key)
        if isinstance(cached, list):
            return cached

        result = self.compute()
        redis_client.set_json(cache_key, result, ex=self.cache_ttl_seconds)
        return result

    def compute(self) -> list[dict]:
        """不经过缓存，直接从数据库计算排行榜"""
        # 1) 按 (姓名, 谜题) 折叠：行已按提交时间升序，第一次出现即最早一次
        solves: dict[tuple[str, int], dict] = {}
        for row in self.submission_repo.correct_rows():
            solves.setdefault((row["name"], row["puzzle_id"]), row)

        # 2) 按姓名汇总答对的不同谜题
        board: dict[str, dict] = {}
        for (name, _puzzle_id), solve in solves.items():
            entry = board.get(name)
            if entry is None:
                board[name] = {
                    "name": name,
                    "email": solve["email"],
                    "correct_submissions": 1,
                    "first_correct": solve["submitted_at"],
                }
                continue
            entry["correct_submissions"] += 1
            if solve["submitted_at"] < entry["first_correct"]:
                entry["first_correct"] = solve["submitted_at"]
                entry["email"] = solve["email"]

        # 3) 排序并生成名次
        ranked = sorted(
            board.values(),
            key=lambda item: (-item["correct_submissions"], item["first_correct"], item["name"]),
        )[: self.limit]
        result = [
            {
                "rank": idx,
                "name": entry["name"],
                "email": entry["email"],
                "correct_submissions": entry["correct_submissions"],
            }
            for idx, entry in enumerate(ranked, start=1)
        ]
        logger.info(
            "排行榜已重新计算",
            extra=logger_extra({"solvers": len(board), "returned": len(result)}),
        )
        return result


class CorrectSolverService(BaseService[list[dict]]):
    """
    某道谜题的答对选手：
    - 谜题不存在抛 404
    - 按规范化后的姓名去重，保留最早答对那次的原始姓名与邮箱，按答对时间升序
    """

    atomic_enabled = False

    def __init__(self, puzzle_repo: PuzzleRepo | None = None, submission_repo: SubmissionRepo | None = None):
        self.puzzle_repo = puzzle_repo or PuzzleRepo()
        self.submission_repo = submission_repo or SubmissionRepo()

    def perform(self, puzzle_id: int) -> list[dict]:
        self.puzzle_repo.get_by_id(puzzle_id)
        seen: set[str] = set()
        solvers: list[dict] = []
        for row in self.submission_repo.correct_rows(puzzle_id=puzzle_id):
            key = normalize_solver_name(row["name"])
            if key in seen:
                continue
            seen.add(key)
            solvers.append({"name": row["name"], "email": row["email"]})
        return solvers
