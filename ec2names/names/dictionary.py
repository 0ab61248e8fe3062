"""
ec2names/names/dictionary.py - 계정별 인스턴스 이름 사전

NameDictionary: 한 계정 범위의 resource ID -> 이름 맵 (스레드 안전, 삭제/크기 제한 없음)
NameDictionaryRegistry: 계정 표시 이름 -> NameDictionary (처음 접근 시 빈 사전 생성, 제거 없음)

동시 갱신 시에는 마지막 쓰기가 이깁니다.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable


class NameDictionary:
    """resource ID -> 이름 맵"""

    def __init__(self) -> None:
        self._names: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, resource_id: str) -> str | None:
        # dict 단건 조회는 GIL 하에서 원자적
        return self._names.get(resource_id)

    def put(self, resource_id: str, name: str) -> None:
        with self._lock:
            self._names[resource_id] = name

    def put_many(self, items: Iterable[tuple[str, str]]) -> int:
        """여러 항목 저장

        Returns:
            저장한 항목 수
        """
        count = 0
        with self._lock:
            for resource_id, name in items:
                self._names[resource_id] = name
                count += 1
        return count

    def snapshot(self) -> dict[str, str]:
        """현재 내용의 복사본"""
        with self._lock:
            return dict(self._names)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"NameDictionary(entries={len(self)})"


class NameDictionaryRegistry:
    """계정 표시 이름 -> NameDictionary"""

    def __init__(self) -> None:
        self._dictionaries: dict[str, NameDictionary] = {}
        self._lock = threading.Lock()

    def get(self, account_name: str) -> NameDictionary:
        """계정 사전 반환 (없으면 빈 사전 생성)"""
        dictionary = self._dictionaries.get(account_name)
        if dictionary is not None:
            return dictionary

        with self._lock:
            return self._dictionaries.setdefault(account_name, NameDictionary())

    def names(self) -> list[str]:
        with self._lock:
            return list(self._dictionaries)

    def __len__(self) -> int:
        return len(self._dictionaries)
