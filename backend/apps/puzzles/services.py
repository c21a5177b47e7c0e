from __future__ import annotations

import time
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils.text import slugify

from apps.common.base.base_service import BaseService
from apps.common.exceptions import StorageUnavailableError, ValidationError
from apps.common.infra.file_storage import get_storage
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.utils.validators import validate_upload_file
from apps.leaderboard.services import invalidate_leaderboard_cache

from .models import Puzzle
from .repo import PuzzleRepo
from .schemas import PuzzleCreateSchema, PuzzleUpdateSchema

# 服务层：谜题的创建、更新、删除与查询

logger = get_logger(__name__)

# 题面/题解附件：图片或 PDF
ALLOWED_UPLOAD_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "application/pdf"}
ALLOWED_UPLOAD_SUFFIXES = {".jpeg", ".jpg", ".png", ".pdf"}

SLUG_MAX_BASE_LENGTH = 200


def validate_puzzle_upload(uploaded_file, *, field_name: str) -> None:
    """校验谜题附件：仅允许 jpeg/jpg/png/pdf，大小受 UPLOAD_MAX_SIZE_MB 限制"""
    validate_upload_file(
        uploaded_file,
        allowed_content_types=ALLOWED_UPLOAD_CONTENT_TYPES,
        allowed_suffixes=ALLOWED_UPLOAD_SUFFIXES,
        max_size_mb=int(getattr(settings, "UPLOAD_MAX_SIZE_MB", 10)),
        field_name=field_name,
    )


def base_slug(title: str) -> str:
    """
    由标题生成 slug：小写、仅保留字母数字与连字符
    标题全为非 ASCII 字符时回退为 puzzle
    """
    slug = slugify(title).replace("_", "-")
    slug = "-".join(part for part in slug.split("-") if part)[:SLUG_MAX_BASE_LENGTH].strip("-")
    return slug or "puzzle"


def unique_slug(title: str, *, repo: PuzzleRepo, exclude_id: Optional[int] = None) -> str:
    """
    生成全局唯一 slug：已被占用时追加 -<毫秒时间戳>
    """
    slug = base_slug(title)
    if not repo.slug_taken(slug, exclude_id=exclude_id):
        return slug
    while True:
        candidate = f"{slug}-{int(time.time() * 1000)}"
        if not repo.slug_taken(candidate, exclude_id=exclude_id):
            return candidate
        # 同一毫秒内的重复标题，等下一个时间戳
        time.sleep(0.001)


def store_puzzle_file(uploaded_file) -> str:
    """将上传文件写入存储后端，返回相对路径"""
    relative_path, _ = get_storage().save_bytes(
        content=uploaded_file.read(),
        filename=getattr(uploaded_file, "name", "") or "file",
        subdir=getattr(settings, "PUZZLE_UPLOAD_SUBDIR", "puzzles"),
    )
    return relative_path


def discard_files(paths: list[str], *, reason: str) -> None:
    """
    删除一组已存储的文件
    - 删除失败只记录日志，遗留文件由定时清理任务回收
    """
    storage = get_storage()
    for path in paths:
        if not path:
            continue
        try:
            storage.delete(path)
        except StorageUnavailableError:
            logger.warning("附件删除失败，等待定时清理", extra=logger_extra({"path": path, "reason": reason}))


def _require_file_for_format(fmt: str, file_path: str) -> None:
    if fmt in Puzzle.FILE_FORMATS and not file_path:
        raise ValidationError(message="图片或 PDF 格式的谜题必须上传题面文件")


class PuzzleQueryService(BaseService[Puzzle]):
    """
    谜题查询服务：列表 / 详情 / 当前活动谜题
    """

    atomic_enabled = False

    def __init__(self, repo: PuzzleRepo | None = None):
        self.repo = repo or PuzzleRepo()

    def perform(self, puzzle_id: int) -> Puzzle:
        """根据 ID 获取谜题，不存在抛 PuzzleNotFoundError"""
        return self.repo.get_by_id(puzzle_id)

    def list_puzzles(self) -> list[Puzzle]:
        """全部谜题，按创建时间倒序"""
        return list(self.repo.get_queryset())

    def latest_active(self) -> Optional[Puzzle]:
        """最近一道仍在进行中的谜题，没有则为 None"""
        return self.repo.latest_active()


class PuzzleCreateService(BaseService[Puzzle]):
    """
    创建谜题：
    - 校验附件类型/大小，图片/PDF 格式必须带题面文件
    - 生成唯一 slug
    - 先写文件再落库；落库失败时删除刚写入的文件
    """

    def __init__(self, repo: PuzzleRepo | None = None):
        self.repo = repo or PuzzleRepo()

    def validate(self, schema: PuzzleCreateSchema, puzzle_file=None, solution_file=None) -> None:
        if puzzle_file is not None:
            validate_puzzle_upload(puzzle_file, field_name="题面文件")
        if solution_file is not None:
            validate_puzzle_upload(solution_file, field_name="题解文件")
        if schema.format in Puzzle.FILE_FORMATS and puzzle_file is None:
            raise ValidationError(message="图片或 PDF 格式的谜题必须上传题面文件")

    def perform(self, schema: PuzzleCreateSchema, puzzle_file=None, solution_file=None) -> Puzzle:
        stored: list[str] = []
        try:
            data = schema.to_model_data()
            if puzzle_file is not None:
                data["file_path"] = store_puzzle_file(puzzle_file)
                stored.append(data["file_path"])
            if solution_file is not None:
                data["solution_file_path"] = store_puzzle_file(solution_file)
                stored.append(data["solution_file_path"])
            data["slug"] = unique_slug(schema.title, repo=self.repo)
            puzzle = self.repo.create(data)
        except Exception:
            discard_files(stored, reason="create_failed")
            raise
        logger.info(
            "谜题已创建",
            extra=logger_extra(
                {
                    "puzzle_id": puzzle.id,
                    "slug": puzzle.slug,
                    "format": puzzle.format,
                    "deadline": puzzle.deadline.isoformat(),
                    "files": len(stored),
                }
            ),
        )
        return puzzle


class PuzzleUpdateService(BaseService[Puzzle]):
    """
    更新谜题：
    - 只写入提供的字段；标题变化时重新生成 slug（排除自身做占用检查）
    - 可选替换题面/题解文件，旧文件在事务提交后删除
    """

    def __init__(self, repo: PuzzleRepo | None = None):
        self.repo = repo or PuzzleRepo()

    def validate(self, puzzle_id: int, schema: PuzzleUpdateSchema, puzzle_file=None, solution_file=None) -> None:
        if puzzle_file is not None:
            validate_puzzle_upload(puzzle_file, field_name="题面文件")
        if solution_file is not None:
            validate_puzzle_upload(solution_file, field_name="题解文件")

    def perform(self, puzzle_id: int, schema: PuzzleUpdateSchema, puzzle_file=None, solution_file=None) -> Puzzle:
        puzzle = self.repo.get_by_id(puzzle_id, for_update=True)
        changes = schema.changes()
        if "title" in changes and changes["title"] != puzzle.title:
            changes["slug"] = unique_slug(changes["title"], repo=self.repo, exclude_id=puzzle.id)

        stored: list[str] = []
        replaced: list[str] = []
        try:
            if puzzle_file is not None:
                changes["file_path"] = store_puzzle_file(puzzle_file)
                stored.append(changes["file_path"])
                replaced.append(puzzle.file_path)
            if solution_file is not None:
                changes["solution_file_path"] = store_puzzle_file(solution_file)
                stored.append(changes["solution_file_path"])
                replaced.append(puzzle.solution_file_path)
            _require_file_for_format(
                changes.get("format", puzzle.format),
                changes.get("file_path", puzzle.file_path),
            )
            puzzle = self.repo.update(puzzle, changes)
        except Exception:
            discard_files(stored, reason="update_failed")
            raise

        old_files = [path for path in replaced if path]
        if old_files:
            transaction.on_commit(lambda: discard_files(old_files, reason="replaced"))
        logger.info(
            "谜题已更新",
            extra=logger_extra({"puzzle_id": puzzle.id, "fields": sorted(changes.keys())}),
        )
        return puzzle


class PuzzleDeleteService(BaseService[None]):
    """
    删除谜题：
    - 数据库级联删除该谜题的全部提交
    - 事务提交后删除题面/题解文件，并使排行榜缓存失效
    """

    def __init__(self, repo: PuzzleRepo | None = None):
        self.repo = repo or PuzzleRepo()

    def perform(self, puzzle_id: int) -> None:
        puzzle = self.repo.get_by_id(puzzle_id, for_update=True)
        files = puzzle.stored_files
        _, deleted = self.repo.delete(puzzle)
        submissions_deleted = deleted.get("submissions.Submission", 0)

        def _cleanup() -> None:
            discard_files(files, reason="puzzle_deleted")
            invalidate_leaderboard_cache()

        transaction.on_commit(_cleanup)
        logger.info(
            "谜题已删除",
            extra=logger_extra(
                {
                    "puzzle_id": puzzle_id,
                    "files": len(files),
                    "submissions_deleted": submissions_deleted,
                }
            ),
        )
        return None
