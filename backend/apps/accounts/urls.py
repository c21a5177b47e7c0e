from __future__ import annotations

from django.urls import path

from .views import AdminLoginView, AdminLogoutView

app_name = "accounts"

# 管理员会话路由（挂载在 /api/admin/ 下）
urlpatterns = [
    # 登录：校验配置中的管理员凭据，返回会话令牌
    path("login", AdminLoginView.as_view(), name="login"),
    # 注销：删除会话，令牌随之失效
    path("logout", AdminLogoutView.as_view(), name="logout"),
]
