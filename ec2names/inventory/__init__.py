"""
ec2names/inventory - 원격 인벤토리 조회

리소스 ID와 태그 목록을 페이지 단위로 조회하는 클라이언트를 제공합니다.
"""

from .client import EC2InventoryClient, InventoryClient, create_inventory_client
from .types import ResourceRecord, Tag, TagFilter

__all__ = [
    "InventoryClient",
    "EC2InventoryClient",
    "create_inventory_client",
    "ResourceRecord",
    "Tag",
    "TagFilter",
]
