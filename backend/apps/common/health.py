from __future__ import annotations

from django.conf import settings
from django.db import DatabaseError, connection
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.infra.logger import get_logger
from apps.common.permissions import AllowAny
from apps.common.schema_utils import api_response_schema

logger = get_logger(__name__)


def database_state() -> str:
    """探测数据库连接，返回 connected / disconnected"""
    try:
        connection.ensure_connection()
    except DatabaseError:
        logger.warning("健康检查：数据库不可用", exc_info=True)
        return "disconnected"
    return "connected"


class HealthCheckView(APIView):
    """
    健康检查接口
    - 用于负载均衡/监控探活，返回统一成功格式
    - 只探测数据库连接，保持快速响应
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="健康检查",
        request=None,
        responses=api_response_schema(
            "HealthCheck",
            {
                "status": serializers.CharField(help_text="ok / degraded"),
                "timestamp": serializers.DateTimeField(),
                "database": serializers.CharField(help_text="connected / disconnected"),
                "environment": serializers.CharField(),
            },
        ),
    )
    def get(self, request: Request) -> Response:
        _ = request
        database = database_state()
        return response.success(
            {
                "status": "ok" if database == "connected" else "degraded",
                "timestamp": timezone.now().isoformat(),
                "database": database,
                "environment": "development" if settings.DEBUG else "production",
            }
        )
