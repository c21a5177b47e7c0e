"""
DRF 全局异常处理器（REST_FRAMEWORK.EXCEPTION_HANDLER）

所有错误统一落到 {code, message, data, extra}：
- BizError：原样输出自身的 code / http_status
- DRF 内置异常：按 _DRF_TO_BIZ 表转换为对应 BizError
- 其余 DRF 能识别的异常（405、415 等）：沿用 DRF 的状态码，code 取 40000 / 50000
- 未知异常（含数据库故障）：记录堆栈，返回 500，只暴露 request_id
"""

from typing import Any, Callable

from rest_framework import exceptions as drf_exc
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from . import exceptions as biz
from .infra.logger import get_logger
from .response import api_response, payload_from_biz_error
from .utils.request_context import get_request_context

logger = get_logger(__name__)


def first_error_message(detail: Any) -> str:
    """DRF 的 detail 可能是字符串、列表或按字段嵌套的字典，取第一条可读信息"""
    while True:
        if isinstance(detail, dict) and detail:
            detail = next(iter(detail.values()))
        elif isinstance(detail, list) and detail:
            detail = detail[0]
        else:
            return str(detail)


def _detail_of(exc: Exception) -> str:
    return first_error_message(getattr(exc, "detail", str(exc)))


# 顺序即匹配优先级
_DRF_TO_BIZ: list[tuple[type, Callable[[Exception], biz.BizError]]] = [
    (drf_exc.ValidationError, lambda e: biz.ValidationError(message=_detail_of(e), extra={"raw_detail": e.detail})),
    (drf_exc.ParseError, lambda e: biz.BadRequestError(message=_detail_of(e))),
    (drf_exc.AuthenticationFailed, lambda e: biz.AuthError(message=_detail_of(e))),
    (drf_exc.NotAuthenticated, lambda e: biz.AuthError(message=_detail_of(e))),
    (drf_exc.NotFound, lambda e: biz.NotFoundError(message=_detail_of(e))),
    (drf_exc.Throttled, lambda e: biz.RateLimitError(message=_detail_of(e), extra={"wait": getattr(e, "wait", None)})),
]


def to_biz_error(exc: Exception) -> biz.BizError | None:
    if isinstance(exc, biz.BizError):
        return exc
    for exc_type, convert in _DRF_TO_BIZ:
        if isinstance(exc, exc_type):
            return convert(exc)
    return None


def _internal_error(exc: Exception, context: dict) -> Response:
    request = context.get("request")
    principal = getattr(request, "user", None)
    logger.exception(
        "接口出现未处理异常",
        exc_info=exc,
        extra={
            "path": getattr(request, "path", None),
            "method": getattr(request, "method", None),
            "session_id": getattr(principal, "session_id", None),
        },
    )
    return api_response(
        code=50000,
        message="内部服务器错误，请稍后重试",
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        extra={"request_id": get_request_context().get("request_id")},
    )


def custom_exception_handler(exc: Exception, context: dict) -> Response | None:
    error = to_biz_error(exc)
    if error is not None:
        return Response(payload_from_biz_error(error), status=error.http_status)

    # Http404 / PermissionDenied / MethodNotAllowed 等交给 DRF 先转成响应
    fallback = drf_exception_handler(exc, context)
    if fallback is None:
        return _internal_error(exc, context)

    http_status = fallback.status_code
    return api_response(
        code=40000 if http_status < 500 else 50000,
        message=first_error_message(fallback.data),
        http_status=http_status,
        extra={"raw": fallback.data},
    )
