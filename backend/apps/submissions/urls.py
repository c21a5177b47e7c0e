from __future__ import annotations

from django.urls import path

from .views import PuzzleSubmissionListView, SubmissionCreateView

app_name = "submissions"

# 路由：公开的答案提交接口（挂载在 /api/ 下）
urlpatterns = [
    path("submissions", SubmissionCreateView.as_view(), name="create"),
    path("submissions/puzzle/<int:puzzle_id>", PuzzleSubmissionListView.as_view(), name="puzzle-list"),
]
