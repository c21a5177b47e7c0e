"""
响应信封：成功与失败都返回

    {"code": 0, "message": "OK", "data": ..., "extra": {...}}

code 为 0 表示成功，否则为 BizError.code；extra 为空时省略。
视图只调用 success / created，异常处理器调用 api_response / payload_from_biz_error。
"""

from typing import Any, Mapping, Optional

from rest_framework import status
from rest_framework.response import Response

from .exceptions import BizError

SUCCESS_CODE = 0

Payload = dict[str, Any]


def build_payload(
        *,
        code: int = SUCCESS_CODE,
        message: str = "OK",
        data: Any = None,
        extra: Optional[Mapping[str, Any]] = None,
) -> Payload:
    payload: Payload = {"code": code, "message": message, "data": data}
    if extra:
        payload["extra"] = dict(extra)
    return payload


def payload_from_biz_error(exc: BizError) -> Payload:
    return build_payload(code=exc.code, message=exc.message, extra=exc.extra)


def api_response(
        *,
        code: int = SUCCESS_CODE,
        message: str = "OK",
        data: Any = None,
        http_status: int = status.HTTP_200_OK,
        extra: Optional[Mapping[str, Any]] = None,
) -> Response:
    return Response(build_payload(code=code, message=message, data=data, extra=extra), status=http_status)


def success(data: Any = None, message: str = "OK") -> Response:
    """200 + code 0"""
    return api_response(data=data, message=message)


def created(data: Any = None, message: str = "Created") -> Response:
    """201：谜题创建、答案提交"""
    return api_response(data=data, message=message, http_status=status.HTTP_201_CREATED)
