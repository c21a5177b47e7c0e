# apps/common/schema_utils.py
"""OpenAPI 文档用的响应结构（drf-spectacular inline serializer）"""

from __future__ import annotations

import copy
from functools import lru_cache

from drf_spectacular.utils import inline_serializer
from rest_framework import serializers


def _envelope(name: str, data_field: serializers.Field, extra_field: serializers.Field | None = None):
    return inline_serializer(
        name=f"{name}Response",
        fields={
            "code": serializers.IntegerField(help_text="业务状态码，0 表示成功"),
            "message": serializers.CharField(help_text="提示信息"),
            "data": data_field,
            "extra": extra_field or serializers.DictField(required=False, allow_null=True, help_text="附加信息"),
        },
    )


def _as_field(value):
    if isinstance(value, type) and issubclass(value, serializers.Serializer):
        return value()
    # 缓存的 serializer 实例不能被多个父字段同时绑定
    return copy.deepcopy(value)


def api_response_schema(name: str, data_fields: dict, *, extra_serializer: serializers.Field | None = None):
    """data 为对象的响应；name 需全局唯一"""
    data = inline_serializer(name=f"{name}Data", fields={key: _as_field(value) for key, value in data_fields.items()})
    return _envelope(name, data, extra_serializer)


def empty_response(name: str):
    """data 为 null（删除、注销）"""
    return _envelope(name, serializers.JSONField(allow_null=True, required=False))


def list_response(name: str, item_serializer, extra_fields: dict | None = None):
    """data.items 为数组"""
    if isinstance(item_serializer, type) and issubclass(item_serializer, serializers.Serializer):
        items = item_serializer(many=True)
    else:
        items = serializers.ListSerializer(child=copy.deepcopy(item_serializer))
    return api_response_schema(name, {"items": items, **(extra_fields or {})})


# 同名 inline serializer 只能生成一次，否则组件名冲突
@lru_cache(maxsize=None)
def puzzle_serializer():
    return inline_serializer(
        name="PuzzleItem",
        fields={
            "id": serializers.IntegerField(),
            "title": serializers.CharField(),
            "slug": serializers.CharField(),
            "description": serializers.CharField(),
            "tags": serializers.ListField(child=serializers.CharField()),
            "difficulty": serializers.ChoiceField(choices=["Easy", "Medium", "Hard", "Expert"]),
            "format": serializers.ChoiceField(choices=["text", "latex", "image", "pdf"]),
            "file_path": serializers.CharField(allow_null=True),
            "file_url": serializers.CharField(allow_null=True),
            "deadline": serializers.DateTimeField(),
            "status": serializers.ChoiceField(choices=["active", "closed"], help_text="由截止时间实时推导"),
            "is_active": serializers.BooleanField(),
            "created_at": serializers.DateTimeField(),
            "solution_format": serializers.CharField(required=False, help_text="管理员或已截止时返回"),
            "solution_text": serializers.CharField(required=False, allow_blank=True),
            "solution_file_path": serializers.CharField(required=False, allow_null=True),
            "solution_file_url": serializers.CharField(required=False, allow_null=True),
        },
    )


@lru_cache(maxsize=None)
def submission_serializer():
    return inline_serializer(
        name="SubmissionItem",
        fields={
            "id": serializers.IntegerField(),
            "puzzle_id": serializers.IntegerField(),
            "puzzle_title": serializers.CharField(required=False, help_text="管理员列表返回"),
            "name": serializers.CharField(),
            "email": serializers.CharField(allow_blank=True),
            "answer": serializers.CharField(),
            "comments": serializers.CharField(allow_blank=True),
            "submitted_at": serializers.DateTimeField(),
            "status": serializers.ChoiceField(choices=["pending", "correct", "incorrect"]),
        },
    )


@lru_cache(maxsize=None)
def leaderboard_entry_serializer():
    return inline_serializer(
        name="LeaderboardEntry",
        fields={
            "rank": serializers.IntegerField(help_text="名次，从 1 开始"),
            "name": serializers.CharField(),
            "email": serializers.CharField(allow_blank=True),
            "correct_submissions": serializers.IntegerField(help_text="答对的不同谜题数"),
        },
    )


@lru_cache(maxsize=None)
def solver_serializer():
    return inline_serializer(
        name="CorrectSolver",
        fields={"name": serializers.CharField(), "email": serializers.CharField(allow_blank=True)},
    )
