from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError


@dataclass
class AdminLoginSchema(BaseSchema[None]):
    """
    管理员登录入参：
    - 邮箱去首尾空白，密码原样比较
    """

    auto_validate: ClassVar[bool] = True

    email: Any = None
    password: Any = None

    def validate(self) -> None:
        if not isinstance(self.email, str) or not self.email.strip():
            raise ValidationError(message="请输入邮箱")
        if not isinstance(self.password, str) or not self.password:
            raise ValidationError(message="请输入密码")
        self.email = self.email.strip()
