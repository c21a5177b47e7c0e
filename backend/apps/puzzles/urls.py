from __future__ import annotations

from django.urls import path

from apps.leaderboard.views import CorrectSolverListView

from .views import LatestActivePuzzleView, PuzzleDetailView, PuzzleListView

app_name = "puzzles"

# 路由：公开的谜题浏览接口（挂载在 /api/ 下）
urlpatterns = [
    path("puzzles", PuzzleListView.as_view(), name="list"),
    path("puzzles/latest/active", LatestActivePuzzleView.as_view(), name="latest-active"),
    path("puzzles/<int:puzzle_id>", PuzzleDetailView.as_view(), name="detail"),
    path("puzzles/<int:puzzle_id>/correct", CorrectSolverListView.as_view(), name="correct-solvers"),
]
