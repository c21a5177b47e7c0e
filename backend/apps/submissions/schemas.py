from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError
from apps.common.utils.validators import require_text, validate_choice, validate_email, validate_max_length

from .models import Submission


# Schema：定义答案提交与状态修改的入参与校验

NAME_MAX_LENGTH = 200
ANSWER_MAX_LENGTH = 10000
COMMENTS_MAX_LENGTH = 5000


def _parse_puzzle_id(value: Any) -> int:
    """谜题 ID 必须是正整数（JSON 数字或数字字符串）"""
    if isinstance(value, bool) or value in (None, ""):
        raise ValidationError(message="缺少谜题 ID")
    try:
        puzzle_id = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(message="谜题 ID 格式不正确") from exc
    if puzzle_id <= 0:
        raise ValidationError(message="谜题 ID 格式不正确")
    return puzzle_id


@dataclass
class SubmissionCreateSchema(BaseSchema[Submission]):
    """
    答案提交入参：
    - 谜题 ID、姓名、答案必填；邮箱可选但需格式正确
    - 姓名去首尾空白，邮箱去空白并转小写，备注默认空字符串
    """

    auto_validate: ClassVar[bool] = True
    ALIASES: ClassVar[dict[str, str]] = {"puzzleId": "puzzle_id"}

    puzzle_id: Any = None
    name: Any = None
    answer: Any = None
    email: Any = ""
    comments: Any = ""

    def validate(self) -> None:
        self.puzzle_id = _parse_puzzle_id(self.puzzle_id)
        self.name = require_text(self.name, field_name="姓名", max_length=NAME_MAX_LENGTH)
        if not isinstance(self.answer, str) or not self.answer.strip():
            raise ValidationError(message="请填写答案")
        validate_max_length(self.answer, field_name="答案", max_length=ANSWER_MAX_LENGTH)

        email = self.email if isinstance(self.email, str) else ""
        self.email = email.strip().lower()
        if self.email:
            validate_email(self.email)

        comments = self.comments if isinstance(self.comments, str) else ""
        validate_max_length(comments, field_name="备注", max_length=COMMENTS_MAX_LENGTH)
        self.comments = comments


@dataclass
class SubmissionStatusSchema(BaseSchema[Submission]):
    """修改提交状态入参：只能是 pending/correct/incorrect 之一"""

    auto_validate: ClassVar[bool] = True
    status: Any = None

    def validate(self) -> None:
        validate_choice(self.status, Submission.Status.values, field_name="状态")
