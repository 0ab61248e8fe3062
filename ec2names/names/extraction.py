"""
ec2names/names/extraction.py - 태그에서 이름 추출
"""

from __future__ import annotations

from collections.abc import Iterable

from ec2names.config import is_blank
from ec2names.inventory.types import Tag


def extract_name(resource_id: str, tags: Iterable[Tag], tag_key: str) -> str:
    """태그 목록에서 리소스 이름 결정

    순서대로 훑어 처음 일치하는 키의 값을 이름으로 사용합니다.
    일치한 태그 값이 비어 있으면 더 찾지 않고 resource_id를 반환합니다.
    일치하는 태그가 없어도 resource_id를 반환합니다.

    Args:
        resource_id: 리소스 ID (대체값)
        tags: 리소스 태그 (순서 유지)
        tag_key: 이름 태그 키 (대소문자 구분)

    Returns:
        이름 또는 resource_id
    """
    for tag in tags:
        if tag.key == tag_key:
            if not is_blank(tag.value):
                return tag.value or resource_id
            break

    return resource_id
