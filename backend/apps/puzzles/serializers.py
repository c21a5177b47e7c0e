"""
谜题模块的序列化工具函数：
- 将模型对象转换为接口响应数据，视图层/服务层复用
- 题解字段只对管理员或已截止的谜题公开
"""

from __future__ import annotations

from apps.common.infra.file_storage import get_storage

from .models import Puzzle


def serialize_puzzle(puzzle: Puzzle, *, include_solution: bool | None = None) -> dict:
    """
    谜题序列化

    include_solution:
        - True：管理员接口，始终返回题解
        - None：公开接口，谜题截止后才返回题解
    """
    storage = get_storage()
    status = puzzle.status
    payload = {
        "id": puzzle.id,
        "title": puzzle.title,
        "slug": puzzle.slug,
        "description": puzzle.description,
        "tags": list(puzzle.tags or []),
        "difficulty": puzzle.difficulty,
        "format": puzzle.format,
        "file_path": puzzle.file_path or None,
        "file_url": storage.url_for(puzzle.file_path),
        "deadline": puzzle.deadline,
        "status": status,
        "is_active": puzzle.is_active,
        "created_at": puzzle.created_at,
    }
    if include_solution is None:
        include_solution = status == Puzzle.STATUS_CLOSED
    if include_solution:
        payload.update(
            {
                "solution_format": puzzle.solution_format,
                "solution_text": puzzle.solution_text,
                "solution_file_path": puzzle.solution_file_path or None,
                "solution_file_url": storage.url_for(puzzle.solution_file_path),
            }
        )
    return payload
