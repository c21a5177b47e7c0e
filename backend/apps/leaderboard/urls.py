from __future__ import annotations

from django.urls import path

from .views import LeaderboardView

app_name = "leaderboard"

# 路由：排行榜（挂载在 /api/ 下）
urlpatterns = [
    path("leaderboard", LeaderboardView.as_view(), name="global"),
]
