"""
ec2names/inventory/client.py - 원격 인벤토리 클라이언트

"태그 포함 리소스 목록 조회 (선택적 ID 필터, 페이지네이션)" 기능을 추상화합니다.

주요 구성 요소:
- InventoryClient: 추상 인터페이스
- EC2InventoryClient: describe_instances 페이지네이터 기반 구현
- create_inventory_client: 계정/리전/구성 스냅샷으로 EC2InventoryClient 생성

Example:
    client = create_inventory_client(credentials, account, "ap-northeast-2", snapshot)
    for record in client.describe(TagFilter.of("tag-key", ["Name"])):
        print(record.resource_id, record.tags)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any

from ec2names.parallel.client import get_client

from .types import ResourceRecord, TagFilter

if TYPE_CHECKING:
    from ec2names.auth import CredentialsProvider
    from ec2names.config import Account, ConfigSnapshot

logger = logging.getLogger(__name__)


class InventoryClient(ABC):
    """원격 인벤토리 조회 인터페이스"""

    @abstractmethod
    def describe(
        self,
        tag_filter: TagFilter | None = None,
        resource_ids: Sequence[str] | None = None,
    ) -> Iterator[ResourceRecord]:
        """리소스 레코드 조회

        다음 페이지 토큰이 없을 때까지 모든 페이지를 순회합니다.

        Args:
            tag_filter: 태그 필터 (None이면 필터 없음)
            resource_ids: 조회할 리소스 ID (None/빈 값이면 전체)

        Yields:
            ResourceRecord
        """


class EC2InventoryClient(InventoryClient):
    """EC2 describe_instances 기반 인벤토리 클라이언트"""

    def __init__(self, ec2_client: Any):
        self._ec2 = ec2_client

    def describe(
        self,
        tag_filter: TagFilter | None = None,
        resource_ids: Sequence[str] | None = None,
    ) -> Iterator[ResourceRecord]:
        params: dict[str, Any] = {}
        if tag_filter is not None:
            params["Filters"] = tag_filter.to_api()
        if resource_ids:
            params["InstanceIds"] = list(resource_ids)

        paginator = self._ec2.get_paginator("describe_instances")
        pages = 0
        for page in paginator.paginate(**params):
            pages += 1
            for reservation in page.get("Reservations", []):
                for data in reservation.get("Instances", []):
                    record = ResourceRecord.from_api(data)
                    if record.resource_id:
                        yield record

        logger.debug("describe_instances: %d 페이지 조회", pages)


def create_inventory_client(
    credentials: CredentialsProvider,
    account: Account,
    region: str,
    snapshot: ConfigSnapshot,
) -> InventoryClient:
    """계정/리전용 EC2InventoryClient 생성

    재시도 횟수, 읽기 타임아웃, 프록시, 엔드포인트는 구성 스냅샷을 따릅니다.
    """
    session = credentials.get_session(account, snapshot.decryption, region=region)
    ec2 = get_client(
        session,
        "ec2",
        region_name=region,
        max_attempts=snapshot.max_retry_size,
        read_timeout=snapshot.read_timeout,
        proxies=snapshot.proxy.to_botocore_proxies(),
        endpoint_url=snapshot.names.endpoint_for(region),
    )
    return EC2InventoryClient(ec2)
