# apps/common/base/base_repo.py

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Optional, TypeVar

from django.db.models import Model, QuerySet

from apps.common.exceptions import NotFoundError

T = TypeVar("T", bound=Model)


class BaseRepo(ABC, Generic[T]):
    """
    数据访问层基类，服务层只通过 Repo 读写 ORM

        class PuzzleRepo(BaseRepo[Puzzle]):
            model = Puzzle
            not_found = PuzzleNotFoundError
    """

    model: type[T]
    not_found: type[NotFoundError] = NotFoundError

    def get_queryset(self) -> QuerySet[T]:
        """子类覆盖以指定默认排序 / select_related"""
        return self.model._default_manager.all()

    def filter(self, *, queryset: Optional[QuerySet[T]] = None, **filters) -> QuerySet[T]:
        base = self.get_queryset() if queryset is None else queryset
        return base.filter(**filters)

    def get_or_none(self, *, queryset: Optional[QuerySet[T]] = None, **filters) -> Optional[T]:
        return self.filter(queryset=queryset, **filters).first()

    def get_by_id(self, pk: int, *, for_update: bool = False) -> T:
        """按主键读取，不存在抛 not_found；for_update 时加行锁（需在事务内）"""
        queryset = self.model._default_manager.select_for_update() if for_update else None
        instance = self.get_or_none(queryset=queryset, pk=pk)
        if instance is None:
            raise self.not_found()
        return instance

    def create(self, data: dict) -> T:
        return self.model._default_manager.create(**data)

    def update(self, instance: T, data: dict) -> T:
        """只保存 data 中出现的字段"""
        if not data:
            return instance
        for field, value in data.items():
            setattr(instance, field, value)
        instance.save(update_fields=list(data))
        return instance

    def delete(self, instance: T) -> Any:
        # 外键级联由 on_delete=CASCADE 处理
        return instance.delete()
