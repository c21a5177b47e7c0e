from __future__ import annotations

from django.conf import settings
from django.views.static import serve
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, extend_schema_view, inline_serializer
from rest_framework import serializers
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import AllowAny, IsAdminSession
from apps.common.schema_utils import api_response_schema, empty_response, list_response, puzzle_serializer

from .schemas import PuzzleCreateSchema, PuzzleUpdateSchema
from .serializers import serialize_puzzle
from .services import PuzzleCreateService, PuzzleDeleteService, PuzzleQueryService, PuzzleUpdateService


# 视图层：公开的谜题浏览接口与管理员的谜题维护接口，仅做参数转换与服务调用


def _uploaded(request: Request, *names: str):
    """按字段名依次查找上传文件（兼容 snake_case 与 camelCase）"""
    for name in names:
        uploaded = request.FILES.get(name)
        if uploaded is not None:
            return uploaded
    return None


_puzzle_form_fields = {
    "title": serializers.CharField(required=False),
    "description": serializers.CharField(required=False),
    "tags": serializers.CharField(required=False, help_text="逗号分隔，或 JSON 数组"),
    "difficulty": serializers.ChoiceField(choices=["Easy", "Medium", "Hard", "Expert"], required=False),
    "format": serializers.ChoiceField(choices=["text", "latex", "image", "pdf"], required=False),
    "deadline": serializers.DateTimeField(required=False),
    "solution_format": serializers.ChoiceField(choices=["text", "latex", "image", "pdf"], required=False),
    "solution_text": serializers.CharField(required=False, allow_blank=True),
    "is_active": serializers.BooleanField(required=False),
    "puzzle_file": serializers.FileField(required=False, help_text="题面文件（jpeg/jpg/png/pdf，10MB 内）"),
    "solution_file": serializers.FileField(required=False, help_text="题解文件（jpeg/jpg/png/pdf，10MB 内）"),
}


@extend_schema_view(get=extend_schema(tags=["puzzles"]))
class PuzzleListView(APIView):
    """谜题列表：公开，按创建时间倒序"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    service = PuzzleQueryService()

    @extend_schema(
        summary="谜题列表",
        operation_id="puzzle_list",
        request=None,
        responses=list_response("PuzzleList", puzzle_serializer()),
    )
    def get(self, request: Request) -> Response:
        _ = request
        items = [serialize_puzzle(puzzle) for puzzle in self.service.list_puzzles()]
        return response.success({"items": items})


@extend_schema_view(get=extend_schema(tags=["puzzles"]))
class PuzzleDetailView(APIView):
    """谜题详情：公开，截止后附带题解"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    service = PuzzleQueryService()

    @extend_schema(
        summary="谜题详情",
        operation_id="puzzle_detail",
        request=None,
        responses=api_response_schema("PuzzleDetail", {"puzzle": puzzle_serializer()}),
    )
    def get(self, request: Request, puzzle_id: int) -> Response:
        _ = request
        puzzle = self.service.execute(puzzle_id)
        return response.success({"puzzle": serialize_puzzle(puzzle)})


@extend_schema_view(get=extend_schema(tags=["puzzles"]))
class LatestActivePuzzleView(APIView):
    """当前活动谜题：最近创建且未截止、已启用的一道，没有则 puzzle 为 null"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    service = PuzzleQueryService()

    @extend_schema(
        summary="当前活动谜题",
        operation_id="puzzle_latest_active",
        request=None,
        responses=api_response_schema("LatestActivePuzzle", {"puzzle": puzzle_serializer()}),
    )
    def get(self, request: Request) -> Response:
        _ = request
        puzzle = self.service.latest_active()
        return response.success({"puzzle": serialize_puzzle(puzzle) if puzzle else None})


@extend_schema_view(post=extend_schema(tags=["admin"]))
class AdminPuzzleCreateView(APIView):
    """
    管理员创建谜题：
    - multipart 表单（可带 puzzle_file/solution_file）或 JSON
    """

    permission_classes = [IsAdminSession]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    service = PuzzleCreateService()

    @extend_schema(
        summary="创建谜题",
        operation_id="admin_puzzle_create",
        request={
            "multipart/form-data": inline_serializer(name="PuzzleCreateForm", fields=_puzzle_form_fields),
            "application/json": OpenApiTypes.OBJECT,
        },
        responses={201: api_response_schema("PuzzleCreate", {"puzzle": puzzle_serializer()})},
    )
    def post(self, request: Request) -> Response:
        schema = PuzzleCreateSchema.from_dict(request.data)
        puzzle = self.service.execute(
            schema,
            puzzle_file=_uploaded(request, "puzzle_file", "puzzleFile"),
            solution_file=_uploaded(request, "solution_file", "solutionFile"),
        )
        return response.created({"puzzle": serialize_puzzle(puzzle, include_solution=True)}, message="谜题已创建")


@extend_schema_view(
    patch=extend_schema(tags=["admin"]),
    delete=extend_schema(tags=["admin"]),
)
class AdminPuzzleDetailView(APIView):
    """管理员更新/删除谜题"""

    permission_classes = [IsAdminSession]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    update_service = PuzzleUpdateService()
    delete_service = PuzzleDeleteService()

    @extend_schema(
        summary="更新谜题",
        operation_id="admin_puzzle_update",
        request={
            "multipart/form-data": inline_serializer(name="PuzzleUpdateForm", fields=_puzzle_form_fields),
            "application/json": OpenApiTypes.OBJECT,
        },
        responses=api_response_schema("PuzzleUpdate", {"puzzle": puzzle_serializer()}),
    )
    def patch(self, request: Request, puzzle_id: int) -> Response:
        schema = PuzzleUpdateSchema.from_dict(request.data)
        puzzle = self.update_service.execute(
            puzzle_id,
            schema,
            puzzle_file=_uploaded(request, "puzzle_file", "puzzleFile"),
            solution_file=_uploaded(request, "solution_file", "solutionFile"),
        )
        return response.success({"puzzle": serialize_puzzle(puzzle, include_solution=True)}, message="谜题已更新")

    @extend_schema(
        summary="删除谜题",
        description="删除谜题及其全部提交记录与附件",
        operation_id="admin_puzzle_delete",
        request=None,
        responses=empty_response("PuzzleDelete"),
    )
    def delete(self, request: Request, puzzle_id: int) -> Response:
        _ = request
        self.delete_service.execute(puzzle_id)
        return response.success(None, message="谜题及相关文件已删除")


def serve_upload(request, path: str):
    """/files/<path>：对外提供上传的题面/题解文件"""
    return serve(request, path, document_root=settings.MEDIA_ROOT)
