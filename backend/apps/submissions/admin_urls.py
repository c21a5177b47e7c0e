from __future__ import annotations

from django.urls import path

from .views import AdminPuzzleSubmissionListView, AdminSubmissionDetailView, AdminSubmissionListView

app_name = "admin-submissions"

# 路由：管理员提交审核接口（挂载在 /api/admin/ 下）
urlpatterns = [
    path("submissions", AdminSubmissionListView.as_view(), name="list"),
    path("submissions/<int:submission_id>", AdminSubmissionDetailView.as_view(), name="detail"),
    path("puzzles/<int:puzzle_id>/submissions", AdminPuzzleSubmissionListView.as_view(), name="puzzle-list"),
]
