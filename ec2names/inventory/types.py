"""
ec2names/inventory/types.py - 인벤토리 레코드 타입

원격 인벤토리 API가 반환하는 리소스 레코드입니다.
이름 추출 후에는 보관하지 않습니다.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Tag:
    """리소스 태그 (key, value)"""

    key: str
    value: str | None = None


@dataclass(frozen=True)
class ResourceRecord:
    """리소스 ID와 태그 목록 (순서 유지)"""

    resource_id: str
    tags: tuple[Tag, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any], id_key: str = "InstanceId") -> ResourceRecord:
        """describe_* 응답 항목에서 생성

        Args:
            data: 응답 항목 (예: Reservations[].Instances[] 원소)
            id_key: 리소스 ID 필드 이름
        """
        return cls(
            resource_id=data.get(id_key, ""),
            tags=tuple(Tag(key=t.get("Key", ""), value=t.get("Value")) for t in data.get("Tags") or []),
        )


@dataclass(frozen=True)
class TagFilter:
    """describe 요청 필터 (예: name="tag-key", values=("Name",))"""

    name: str
    values: tuple[str, ...]

    @classmethod
    def of(cls, name: str, values: Iterable[str]) -> TagFilter:
        return cls(name=name, values=tuple(values))

    def to_api(self) -> list[dict[str, Any]]:
        return [{"Name": self.name, "Values": list(self.values)}]
