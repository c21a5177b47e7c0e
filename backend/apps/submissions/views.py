from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view, inline_serializer
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import AllowAny, IsAdminSession
from apps.common.schema_utils import api_response_schema, empty_response, list_response, submission_serializer

from .schemas import SubmissionCreateSchema, SubmissionStatusSchema
from .services import (
    SubmissionCreateService,
    SubmissionDeleteService,
    SubmissionListService,
    SubmissionStatusService,
    serialize_submission,
)


# 视图层：公开的答案提交接口与管理员的提交审核接口


@extend_schema_view(post=extend_schema(tags=["submissions"]))
class SubmissionCreateView(APIView):
    """
    提交答案：
    - 公开接口，谜题截止后拒绝
    - 支持 puzzleId / puzzle_id 两种字段名
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []
    service = SubmissionCreateService()

    @extend_schema(
        summary="提交答案",
        operation_id="submission_create",
        request=inline_serializer(
            name="SubmissionCreateRequest",
            fields={
                "puzzleId": serializers.IntegerField(help_text="谜题 ID，也可写作 puzzle_id"),
                "name": serializers.CharField(max_length=200),
                "email": serializers.EmailField(required=False, allow_blank=True),
                "answer": serializers.CharField(max_length=10000),
                "comments": serializers.CharField(required=False, allow_blank=True, max_length=5000),
            },
        ),
        responses={201: api_response_schema("SubmissionCreate", {"submission_id": serializers.IntegerField()})},
    )
    def post(self, request: Request) -> Response:
        schema = SubmissionCreateSchema.from_dict(request.data)
        submission = self.service.execute(schema)
        return response.created({"submission_id": submission.id}, message="提交成功")


@extend_schema_view(get=extend_schema(tags=["submissions"]))
class PuzzleSubmissionListView(APIView):
    """某道谜题的提交列表：公开，按提交时间倒序"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    service = SubmissionListService()

    @extend_schema(
        summary="谜题提交列表",
        operation_id="puzzle_submission_list",
        request=None,
        responses=list_response("PuzzleSubmissionList", submission_serializer()),
    )
    def get(self, request: Request, puzzle_id: int) -> Response:
        _ = request
        items = [serialize_submission(item) for item in self.service.for_puzzle(puzzle_id)]
        return response.success({"items": items})


@extend_schema_view(get=extend_schema(tags=["admin"]))
class AdminSubmissionListView(APIView):
    """管理员查看全部提交（带谜题标题）"""

    permission_classes = [IsAdminSession]
    service = SubmissionListService()

    @extend_schema(
        summary="全部提交",
        operation_id="admin_submission_list",
        request=None,
        responses=list_response("AdminSubmissionList", submission_serializer()),
    )
    def get(self, request: Request) -> Response:
        _ = request
        items = [serialize_submission(item, with_puzzle_title=True) for item in self.service.execute()]
        return response.success({"items": items})


@extend_schema_view(get=extend_schema(tags=["admin"]))
class AdminPuzzleSubmissionListView(APIView):
    """管理员查看某道谜题的提交，谜题不存在返回 404"""

    permission_classes = [IsAdminSession]
    service = SubmissionListService()

    @extend_schema(
        summary="谜题提交列表（管理员）",
        operation_id="admin_puzzle_submission_list",
        request=None,
        responses=list_response("AdminPuzzleSubmissionList", submission_serializer()),
    )
    def get(self, request: Request, puzzle_id: int) -> Response:
        _ = request
        items = [
            serialize_submission(item)
            for item in self.service.for_puzzle(puzzle_id, require_puzzle=True)
        ]
        return response.success({"items": items})


@extend_schema_view(
    patch=extend_schema(tags=["admin"]),
    delete=extend_schema(tags=["admin"]),
)
class AdminSubmissionDetailView(APIView):
    """管理员修改提交状态 / 删除提交"""

    permission_classes = [IsAdminSession]
    status_service = SubmissionStatusService()
    delete_service = SubmissionDeleteService()

    @extend_schema(
        summary="修改提交状态",
        operation_id="admin_submission_update_status",
        request=inline_serializer(
            name="SubmissionStatusRequest",
            fields={"status": serializers.ChoiceField(choices=["pending", "correct", "incorrect"])},
        ),
        responses=api_response_schema("SubmissionStatus", {"submission": submission_serializer()}),
    )
    def patch(self, request: Request, submission_id: int) -> Response:
        schema = SubmissionStatusSchema.from_dict(request.data)
        submission = self.status_service.execute(submission_id, schema)
        return response.success({"submission": serialize_submission(submission)}, message="状态已更新")

    @extend_schema(
        summary="删除提交",
        operation_id="admin_submission_delete",
        request=None,
        responses=empty_response("SubmissionDelete"),
    )
    def delete(self, request: Request, submission_id: int) -> Response:
        _ = request
        self.delete_service.execute(submission_id)
        return response.success(None, message="提交已删除")
