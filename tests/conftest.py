"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(fake_inventory, make_provider):
        # fake_inventory: 계정/리전별 응답을 지정할 수 있는 가짜 인벤토리
        # make_provider: fake_inventory를 쓰는 InstanceNameProvider 생성기
        pass
"""

import os
import sys
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock, patch

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ec2names.config import Account, ConfigSnapshot  # noqa: E402
from ec2names.inventory import InventoryClient, ResourceRecord  # noqa: E402

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment():
    """테스트 환경 설정"""
    # 테스트용 환경 변수 설정
    os.environ.setdefault("AWS_DEFAULT_REGION", "ap-northeast-2")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

    yield


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def mock_boto3_session():
    """boto3.Session 모킹"""
    with patch("boto3.Session") as mock_session_class:
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session

        mock_session.client.return_value = MagicMock()
        mock_session.region_name = "ap-northeast-2"

        yield mock_session


@pytest.fixture
def mock_ec2_client():
    """EC2 클라이언트 모킹 (describe_instances 페이지네이터 1페이지)"""
    mock_client = MagicMock()

    page = {
        "Reservations": [
            {
                "Instances": [
                    {
                        "InstanceId": "i-1234567890abcdef0",
                        "InstanceType": "t3.micro",
                        "State": {"Name": "running"},
                        "Tags": [{"Key": "Name", "Value": "test-instance"}],
                    }
                ]
            }
        ]
    }

    mock_paginator = MagicMock()
    mock_paginator.paginate.return_value = [page]
    mock_client.get_paginator.return_value = mock_paginator

    yield mock_client


# =============================================================================
# 가짜 인벤토리
# =============================================================================


class FakeInventory:
    """(계정, 리전)별 페이지 응답을 돌려주는 테스트용 인벤토리

    pages[(account, region)]: 페이지 목록 (각 페이지는 ResourceRecord 목록)
    errors[(account, region)]: describe 호출 시 던질 예외
    delays[(account, region)]: describe 호출 전 대기 시간 (초)
    calls: (account, region, resource_ids) 호출 기록
    snapshots: 클라이언트 생성 시 받은 ConfigSnapshot 기록
    """

    def __init__(self):
        self.pages: Dict[Tuple[str, str], List[List[ResourceRecord]]] = {}
        self.errors: Dict[Tuple[str, str], Exception] = {}
        self.delays: Dict[Tuple[str, str], float] = {}
        self.calls: List[Tuple[str, str, Optional[Tuple[str, ...]]]] = []
        self.filters: List[Any] = []
        self.snapshots: List[ConfigSnapshot] = []
        self._lock = threading.Lock()

    def add_page(self, account: str, region: str, *records: ResourceRecord) -> None:
        self.pages.setdefault((account, region), []).append(list(records))

    def fail(self, account: str, region: str, error: Exception) -> None:
        self.errors[(account, region)] = error

    def delay(self, account: str, region: str, seconds: float) -> None:
        self.delays[(account, region)] = seconds

    def calls_for(self, account: str, region: str) -> list:
        with self._lock:
            return [c for c in self.calls if c[0] == account and c[1] == region]

    def factory(self, account: Account, region: str, snapshot: ConfigSnapshot) -> InventoryClient:
        with self._lock:
            self.snapshots.append(snapshot)
        return _FakeInventoryClient(self, account.display_name, region)


class _FakeInventoryClient(InventoryClient):
    def __init__(self, inventory: FakeInventory, account: str, region: str):
        self._inventory = inventory
        self._key = (account, region)

    def describe(self, tag_filter=None, resource_ids: Optional[Sequence[str]] = None):
        inventory = self._inventory
        with inventory._lock:
            inventory.calls.append((self._key[0], self._key[1], tuple(resource_ids) if resource_ids else None))
            inventory.filters.append(tag_filter)

        delay = inventory.delays.get(self._key)
        if delay:
            time.sleep(delay)

        error = inventory.errors.get(self._key)
        if error is not None:
            raise error

        for page in inventory.pages.get(self._key, []):
            for record in page:
                if resource_ids and record.resource_id not in resource_ids:
                    continue
                yield record


@pytest.fixture
def fake_inventory():
    """테스트용 FakeInventory"""
    return FakeInventory()


@pytest.fixture
def make_provider(fake_inventory):
    """fake_inventory를 사용하는 InstanceNameProvider 생성기 (테스트 종료 시 close)"""
    from ec2names.names import InstanceNameProvider
    from ec2names.parallel import ParallelConfig

    providers = []

    def _make(task_timeout: float = 5.0, refresh_interval: float = 3600.0):
        provider = InstanceNameProvider(
            client_factory=fake_inventory.factory,
            parallel_config=ParallelConfig(max_workers=3, task_timeout=task_timeout),
            refresh_interval=refresh_interval,
        )
        providers.append(provider)
        return provider

    yield _make

    for provider in providers:
        provider.close()


# =============================================================================
# moto 통합 (선택적)
# =============================================================================

try:
    import moto

    @pytest.fixture
    def aws_credentials():
        """moto 사용 시 AWS 자격 증명 설정"""
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
        os.environ["AWS_DEFAULT_REGION"] = "us-east-1"

    @pytest.fixture
    def moto_ec2(aws_credentials):
        """moto를 사용한 EC2 모킹"""
        with moto.mock_aws():
            import boto3

            yield boto3.client("ec2", region_name="us-east-1")

except ImportError:
    # moto가 설치되지 않은 경우 더미 픽스처
    @pytest.fixture
    def moto_ec2():
        pytest.skip("moto not installed")
