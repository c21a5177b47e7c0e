from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import AllowAny
from apps.common.schema_utils import leaderboard_entry_serializer, list_response, solver_serializer

from .services import CorrectSolverService, LeaderboardService


@extend_schema_view(get=extend_schema(tags=["leaderboard"]))
class LeaderboardView(APIView):
    """全局排行榜：公开，最多返回前 100 名"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    service = LeaderboardService()

    @extend_schema(
        summary="排行榜",
        operation_id="leaderboard",
        request=None,
        responses=list_response("Leaderboard", leaderboard_entry_serializer()),
    )
    def get(self, request: Request) -> Response:
        _ = request
        return response.success({"items": self.service.execute()})


@extend_schema_view(get=extend_schema(tags=["puzzles"]))
class CorrectSolverListView(APIView):
    """某道谜题的答对选手（按姓名去重），谜题不存在返回 404"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    service = CorrectSolverService()

    @extend_schema(
        summary="答对选手列表",
        operation_id="puzzle_correct_solvers",
        request=None,
        responses=list_response("CorrectSolverList", solver_serializer()),
    )
    def get(self, request: Request, puzzle_id: int) -> Response:
        _ = request
        return response.success({"items": self.service.execute(puzzle_id)})
