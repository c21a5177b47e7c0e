# apps/common/base/base_schema.py

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, Dict, Generic, Mapping, Optional, TypeVar

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound="BaseSchema[Any]")


def _flatten(data: Mapping[str, Any]) -> dict[str, Any]:
    # QueryDict（表单 / multipart）按单值读取
    if hasattr(data, "getlist"):
        return {key: data.get(key) for key in data.keys()}
    return dict(data)


@dataclass
class BaseSchema(ABC, Generic[T]):
    """
    入参 DTO：视图把 request.data 交给 from_dict，服务层只接触校验后的字段

    - ALIASES 把前端的 camelCase 名称（puzzleId、solutionText）映射到内部字段，
      两种写法同时出现时以内部字段为准
    - 未声明的字段直接丢弃
    - auto_validate 为 True 时构造即校验，否则由服务层调用 validate()
    """

    auto_validate: ClassVar[bool] = False
    ALIASES: ClassVar[dict[str, str]] = {}

    def __post_init__(self):
        if self.auto_validate:
            self.validate()

    @abstractmethod
    def validate(self) -> None:
        """校验失败抛 ValidationError"""

    def to_dict(self, *, exclude_none: bool = False) -> Dict[str, Any]:
        data = asdict(self)
        if exclude_none:
            return {key: value for key, value in data.items() if value is not None}
        return data

    @classmethod
    def from_dict(
            cls: type[SchemaType],
            data: Mapping[str, Any],
            *,
            auto_validate: Optional[bool] = None,
    ) -> SchemaType:
        raw = _flatten(data)
        for alias, target in cls.ALIASES.items():
            if alias in raw:
                value = raw.pop(alias)
                raw.setdefault(target, value)
        known = {f.name for f in fields(cls)}
        instance = cls(**{key: value for key, value in raw.items() if key in known})  # type: ignore[arg-type]
        if auto_validate and not cls.auto_validate:
            instance.validate()
        return instance
