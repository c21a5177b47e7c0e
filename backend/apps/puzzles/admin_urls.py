from __future__ import annotations

from django.urls import path

from .views import AdminPuzzleCreateView, AdminPuzzleDetailView

app_name = "admin-puzzles"

# 路由：管理员谜题维护接口（挂载在 /api/admin/ 下）
urlpatterns = [
    path("puzzles", AdminPuzzleCreateView.as_view(), name="create"),
    path("puzzles/<int:puzzle_id>", AdminPuzzleDetailView.as_view(), name="detail"),
]
