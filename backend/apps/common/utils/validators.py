"""
校验工具集合：提供常用字段格式校验
"""

from __future__ import annotations

from typing import Iterable

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email as django_validate_email

from apps.common.exceptions import ValidationError


def validate_email(email: str) -> None:
    """校验邮箱格式，不通过抛出 ValidationError"""
    try:
        django_validate_email(email)
    except DjangoValidationError as exc:
        raise ValidationError(message="邮箱格式不正确") from exc


def require_text(value, *, field_name: str, max_length: int | None = None) -> str:
    """
    必填文本：去掉首尾空白后不能为空，可选长度上限
    返回清洗后的字符串
    """
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(message=f"请填写{field_name}")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(message=f"{field_name}长度不能超过 {max_length} 个字符")
    return text


def validate_max_length(value: str | None, *, field_name: str, max_length: int) -> None:
    """可选文本的长度上限"""
    if value and len(value) > max_length:
        raise ValidationError(message=f"{field_name}长度不能超过 {max_length} 个字符")


def validate_choice(value, choices: Iterable[str], *, field_name: str) -> None:
    """枚举值校验"""
    allowed = list(choices)
    if value not in allowed:
        raise ValidationError(
            message=f"{field_name}取值不合法，可选值：{'/'.join(allowed)}",
            extra={"field": field_name, "allowed": allowed},
        )


def validate_upload_file(
    uploaded_file,
    *,
    allowed_content_types: Iterable[str] | None = None,
    allowed_suffixes: Iterable[str] | None = None,
    max_size_mb: int = 10,
    field_name: str = "文件",
) -> None:
    """
    通用上传校验：MIME/后缀/大小
    """
    if uploaded_file is None:
        raise ValidationError(message=f"请上传{field_name}")
    content_type = (getattr(uploaded_file, "content_type", "") or "").lower()
    name_lower = (getattr(uploaded_file, "name", "") or "").lower()
    size = getattr(uploaded_file, "size", 0) or 0

    if allowed_content_types:
        allowed_content_types = {ct.lower() for ct in allowed_content_types}
        if content_type not in allowed_content_types:
            raise ValidationError(message=f"{field_name}类型不受支持，请检查文件格式")

    if allowed_suffixes:
        suffix = "." + name_lower.split(".")[-1] if "." in name_lower else ""
        allowed_suffixes = {s.lower() for s in allowed_suffixes}
        if suffix not in allowed_suffixes:
            raise ValidationError(message=f"{field_name}类型不受支持，请检查文件后缀")

    if size > max_size_mb * 1024 * 1024:
        raise ValidationError(message=f"{field_name}大小不可超过 {max_size_mb}MB")
