from __future__ import annotations

import time

from celery import shared_task
from django.conf import settings

from apps.common.exceptions import StorageUnavailableError
from apps.common.infra.file_storage import file_age_seconds, get_storage
from apps.common.infra.logger import get_logger, logger_extra

from .repo import PuzzleRepo

logger = get_logger(__name__)


@shared_task(name="apps.puzzles.tasks.sweep_orphan_uploads")
def sweep_orphan_uploads() -> int:
    """
    Celery 定时任务：清理没有任何谜题引用的上传文件

    - 只处理谜题附件子目录下的文件
    - 超过 ORPHAN_UPLOAD_GRACE_SECONDS 的文件才会删除，避免误删正在创建中的谜题附件
    - 单个文件删除失败仅记录日志，下一轮继续尝试
    """
    start = time.time()
    grace = int(getattr(settings, "ORPHAN_UPLOAD_GRACE_SECONDS", 3600))
    subdir = getattr(settings, "PUZZLE_UPLOAD_SUBDIR", "puzzles")
    storage = get_storage()
    referenced = PuzzleRepo().referenced_files()

    removed = 0
    for relative_path, modified_at in storage.iter_files(subdir):
        if relative_path in referenced or file_age_seconds(modified_at) < grace:
            continue
        try:
            if storage.delete(relative_path):
                removed += 1
        except StorageUnavailableError:
            logger.warning("孤儿附件删除失败", extra=logger_extra({"path": relative_path}))

    logger.info(
        "孤儿附件清理完成",
        extra=logger_extra({"removed": removed, "elapsed_ms": int((time.time() - start) * 1000)}),
    )
    return removed
