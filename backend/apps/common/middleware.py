from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from apps.common.utils.request_context import (
    clear_request_context,
    generate_request_id,
    get_client_ip,
    set_request_context,
)


class RequestContextMiddleware(MiddlewareMixin):
    """
    在请求生命周期内写入 request_id、方法、路径、IP、UA，供日志格式化器使用
    管理员会话信息由认证类在认证成功后补充
    """

    def process_request(self, request):
        set_request_context(
            request_id=request.headers.get("X-Request-ID") or generate_request_id(),
            path=getattr(request, "path", ""),
            method=getattr(request, "method", ""),
            ip=get_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

    @staticmethod
    def process_response(request, response):
        _ = request
        clear_request_context()
        return response

    @staticmethod
    def process_exception(request, exception):
        _ = request
        _ = exception
        clear_request_context()
        return None
