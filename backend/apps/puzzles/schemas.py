from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, ClassVar, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError
from apps.common.utils.validators import require_text, validate_choice

from .models import Puzzle


# Schema：定义谜题创建/更新的入参与校验

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 20000
TAG_MAX_LENGTH = 50

# 前端使用 camelCase 字段
PUZZLE_ALIASES = {
    "solutionFormat": "solution_format",
    "solutionText": "solution_text",
    "isActive": "is_active",
}


def parse_deadline(value: Any) -> datetime:
    """
    解析截止时间：
    - 支持 ISO 8601（带或不带时区）以及纯日期（按当天 00:00）
    - 不带时区的值按服务器时区解释
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            parsed = parse_datetime(raw)
            if parsed is None:
                day = parse_date(raw)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError(message="截止时间格式不正确，请使用 ISO 8601 格式")
    else:
        raise ValidationError(message="请填写截止时间")
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_current_timezone())
    return parsed


def normalize_tags(value: Any) -> list[str]:
    """
    标签规范化：逗号分隔字符串或列表均可，去空白、丢弃空值，保持原顺序
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value if item is not None]
    else:
        raise ValidationError(message="标签格式不正确")
    tags = [item.strip() for item in items if item and item.strip()]
    for tag in tags:
        if len(tag) > TAG_MAX_LENGTH:
            raise ValidationError(message=f"单个标签长度不能超过 {TAG_MAX_LENGTH} 个字符")
    return tags


def parse_bool(value: Any, *, field_name: str) -> bool:
    """表单中的布尔值以字符串形式到达，这里统一转换"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
    if isinstance(value, int):
        return bool(value)
    raise ValidationError(message=f"{field_name}必须为布尔值")


def _validate_solution_format(value: str) -> None:
    if value:
        validate_choice(value, Puzzle.Format.values, field_name="题解格式")


@dataclass
class PuzzleCreateSchema(BaseSchema[Puzzle]):
    """
    创建谜题入参：
    - 标题/描述/难度/格式/截止时间必填
    - tags 支持逗号分隔字符串或数组
    - 图片/PDF 格式需要题面文件（由服务层结合上传文件校验）
    """

    auto_validate: ClassVar[bool] = True
    ALIASES: ClassVar[dict[str, str]] = PUZZLE_ALIASES

    title: Any = None
    description: Any = None
    difficulty: Any = None
    format: Any = None
    deadline: Any = None
    tags: Any = field(default_factory=list)
    solution_format: Any = ""
    solution_text: Any = ""
    is_active: Any = True

    def validate(self) -> None:
        self.title = require_text(self.title, field_name="标题", max_length=TITLE_MAX_LENGTH)
        self.description = require_text(self.description, field_name="描述", max_length=DESCRIPTION_MAX_LENGTH)
        validate_choice(self.difficulty, Puzzle.Difficulty.values, field_name="难度")
        validate_choice(self.format, Puzzle.Format.values, field_name="题面格式")
        self.deadline = parse_deadline(self.deadline)
        self.tags = normalize_tags(self.tags)
        self.solution_format = self.solution_format or ""
        _validate_solution_format(self.solution_format)
        self.solution_text = self.solution_text or ""
        if not isinstance(self.solution_text, str):
            raise ValidationError(message="题解内容格式不正确")
        self.is_active = parse_bool(self.is_active, field_name="是否启用")

    def to_model_data(self) -> dict:
        """转换为模型字段（不含 slug 与文件路径）"""
        return {
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty,
            "format": self.format,
            "deadline": self.deadline,
            "tags": self.tags,
            "solution_format": self.solution_format,
            "solution_text": self.solution_text,
            "is_active": self.is_active,
        }


@dataclass
class PuzzleUpdateSchema(BaseSchema[Puzzle]):
    """
    更新谜题入参：所有字段可选，只校验并写入提供的字段
    """

    auto_validate: ClassVar[bool] = True
    ALIASES: ClassVar[dict[str, str]] = PUZZLE_ALIASES

    title: Optional[Any] = None
    description: Optional[Any] = None
    difficulty: Optional[Any] = None
    format: Optional[Any] = None
    deadline: Optional[Any] = None
    tags: Optional[Any] = None
    solution_format: Optional[Any] = None
    solution_text: Optional[Any] = None
    is_active: Optional[Any] = None

    def validate(self) -> None:
        if self.title is not None:
            self.title = require_text(self.title, field_name="标题", max_length=TITLE_MAX_LENGTH)
        if self.description is not None:
            self.description = require_text(self.description, field_name="描述", max_length=DESCRIPTION_MAX_LENGTH)
        if self.difficulty is not None:
            validate_choice(self.difficulty, Puzzle.Difficulty.values, field_name="难度")
        if self.format is not None:
            validate_choice(self.format, Puzzle.Format.values, field_name="题面格式")
        if self.deadline is not None:
            self.deadline = parse_deadline(self.deadline)
        if self.tags is not None:
            self.tags = normalize_tags(self.tags)
        if self.solution_format is not None:
            _validate_solution_format(self.solution_format)
        if self.solution_text is not None and not isinstance(self.solution_text, str):
            raise ValidationError(message="题解内容格式不正确")
        if self.is_active is not None:
            self.is_active = parse_bool(self.is_active, field_name="是否启用")

    def changes(self) -> dict:
        """仅返回调用方显式提供的字段"""
        return self.to_dict(exclude_none=True)
