# apps/common/base/base_service.py

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from django.db import transaction

from apps.common.exceptions import BizError
from apps.common.infra.logger import get_logger, logger_extra

logger = get_logger(__name__)

ServiceReturn = TypeVar("ServiceReturn")


class BaseService(ABC, Generic[ServiceReturn]):
    """
    业务服务基类：validate -> perform（默认包在事务里）-> handle_error

    视图只调用 execute()（或直接调用实例）；服务只接收普通参数与 Schema，
    通过 Repo 读写数据库。读服务把 atomic_enabled 设为 False。
    """

    atomic_enabled: bool = True
    atomic_savepoint: bool = True

    def validate(self, *args, **kwargs) -> None:
        """前置检查钩子，默认不做事"""
        return None

    @abstractmethod
    def perform(self, *args, **kwargs) -> ServiceReturn:
        ...

    def execute(self, *args, **kwargs) -> ServiceReturn:
        try:
            self.validate(*args, **kwargs)
            if not self.atomic_enabled:
                return self.perform(*args, **kwargs)
            with transaction.atomic(savepoint=self.atomic_savepoint):
                return self.perform(*args, **kwargs)
        except Exception as exc:
            return self.handle_error(exc)

    __call__ = execute

    def handle_error(self, exc: Exception) -> ServiceReturn:
        """BizError 原样抛出；其它异常记录后抛出，由异常处理器返回 500"""
        if not isinstance(exc, BizError):
            logger.exception(
                "业务服务出现系统异常",
                exc_info=exc,
                extra=logger_extra({"service": type(self).__name__}),
            )
        raise exc
