"""管理员会话接口：登录 / 注销

每个接口仅负责：
- 接收并校验参数（Schema）
- 调用对应业务 Service
- 使用统一响应封装成功结果
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import AllowAny, IsAdminSession
from apps.common.schema_utils import api_response_schema, empty_response
from apps.common.throttles import LoginRateThrottle
from apps.common.utils.request_context import get_client_ip

from .schemas import AdminLoginSchema
from .services import AdminLoginService, AdminLogoutService


class AdminLoginView(APIView):
    """管理员登录：返回 24 小时有效的会话令牌"""

    # 登录接口本身不需要认证，携带的旧令牌也不解析
    permission_classes = [AllowAny]
    authentication_classes: list = []
    # 按 IP 限速，防止口令爆破
    throttle_classes = [LoginRateThrottle]
    service = AdminLoginService()

    @extend_schema(
        tags=["admin-auth"],
        summary="管理员登录",
        operation_id="admin_login",
        request=inline_serializer(
            name="AdminLoginRequest",
            fields={
                "email": serializers.EmailField(),
                "password": serializers.CharField(),
            },
        ),
        responses=api_response_schema("AdminLogin", {"token": serializers.CharField(help_text="Bearer 令牌")}),
        examples=[
            OpenApiExample(
                "登录请求示例",
                value={"email": "admin@example.com", "password": "change-me"},
                request_only=True,
            )
        ],
    )
    def post(self, request: Request) -> Response:
        schema = AdminLoginSchema.from_dict(request.data)
        data = self.service.execute(
            schema,
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
            ip=get_client_ip(request),
        )
        return response.success(data, message="登录成功")


class AdminLogoutView(APIView):
    """管理员注销：删除当前会话，令牌立即失效"""

    permission_classes = [IsAdminSession]
    service = AdminLogoutService()

    @extend_schema(
        tags=["admin-auth"],
        summary="管理员注销",
        operation_id="admin_logout",
        request=None,
        responses=empty_response("AdminLogout"),
    )
    def post(self, request: Request) -> Response:
        self.service.execute(request.user.session_id)
        return response.success(None, message="已注销")
