"""
tests/names/test_refresh.py - RefreshOrchestrator 테스트
"""

import pytest
from botocore.exceptions import ClientError

from ec2names.config import Account, ConfigSnapshot, NameResolutionConfig, SnapshotHolder
from ec2names.inventory import ResourceRecord, Tag, TagFilter
from ec2names.names import NameDictionaryRegistry, RefreshOrchestrator, build_tag_filter
from ec2names.parallel import ErrorCategory, ParallelConfig, ParallelExecutor


def _record(resource_id, name=None):
    tags = (Tag("Name", name),) if name is not None else ()
    return ResourceRecord(resource_id=resource_id, tags=tags)


@pytest.fixture
def executor():
    executor = ParallelExecutor(ParallelConfig(max_workers=3, task_timeout=5))
    yield executor
    executor.shutdown()


@pytest.fixture
def registry():
    return NameDictionaryRegistry()


def _orchestrator(snapshot, registry, fake_inventory, executor):
    return RefreshOrchestrator(SnapshotHolder(snapshot), registry, fake_inventory.factory, executor)


class TestBuildTagFilter:
    """build_tag_filter 테스트"""

    def test_default_filter(self):
        """기본값: tag-key = Name"""
        tag_filter = build_tag_filter(ConfigSnapshot())

        assert tag_filter == TagFilter("tag-key", ("Name",))

    def test_custom_tag_key(self):
        snapshot = ConfigSnapshot(names=NameResolutionConfig(tag_key="Hostname"))

        assert build_tag_filter(snapshot) == TagFilter("tag-key", ("Hostname",))

    @pytest.mark.parametrize("filter_name", [None, "", "  "])
    def test_blank_filter_name(self, filter_name):
        """필터 이름이 비면 필터 없음"""
        snapshot = ConfigSnapshot(names=NameResolutionConfig(tag_filter_name=filter_name))

        assert build_tag_filter(snapshot) is None


class TestBuildTasks:
    """작업 목록 생성 테스트"""

    def test_one_task_per_region(self, registry, fake_inventory, executor):
        """계정 x 리전마다 작업 하나"""
        snapshot = ConfigSnapshot(
            accounts=(
                Account("prod", ("us-east-1", "ap-northeast-2")),
                Account("dev", ("us-west-2",)),
            )
        )
        tasks = _orchestrator(snapshot, registry, fake_inventory, executor).build_tasks(snapshot)

        assert [(t.identifier, t.region) for t in tasks] == [
            ("prod", "us-east-1"),
            ("prod", "ap-northeast-2"),
            ("dev", "us-west-2"),
        ]
        assert tasks[0].payload is snapshot.accounts[0]

    def test_dictionary_created_before_submit(self, registry, fake_inventory, executor):
        """작업 생성 시 계정 사전을 미리 생성"""
        snapshot = ConfigSnapshot(accounts=(Account("prod", ("us-east-1",)),))
        _orchestrator(snapshot, registry, fake_inventory, executor).build_tasks(snapshot)

        assert registry.names() == ["prod"]

    def test_invalid_accounts_skipped(self, registry, fake_inventory, executor):
        """잘못된 계정은 건너뛰고 나머지는 진행"""
        snapshot = ConfigSnapshot(
            accounts=(
                Account("no-regions", ()),
                Account("", ("us-east-1",)),
                Account("partial-key", ("us-east-1",), access_key="AKIA", secret_key=None),
                Account("prod", ("us-east-1",)),
            )
        )
        tasks = _orchestrator(snapshot, registry, fake_inventory, executor).build_tasks(snapshot)

        assert [t.identifier for t in tasks] == ["prod"]
        assert registry.names() == ["prod"]


class TestRefreshAll:
    """전체 갱신 패스 테스트"""

    def test_populates_dictionaries(self, registry, fake_inventory, executor):
        """모든 계정 x 리전 결과를 계정 사전에 저장"""
        fake_inventory.add_page("prod", "us-east-1", _record("i-1", "web-1"), _record("i-2", "web-2"))
        fake_inventory.add_page("prod", "eu-west-1", _record("i-3", "db-1"))
        fake_inventory.add_page("dev", "us-east-1", _record("i-1", "dev-web"))

        snapshot = ConfigSnapshot(
            accounts=(Account("prod", ("us-east-1", "eu-west-1")), Account("dev", ("us-east-1",)))
        )
        result = _orchestrator(snapshot, registry, fake_inventory, executor).refresh_all()

        assert result.success_count == 3
        assert not result.has_any_failure()
        assert sorted(result.get_data()) == [1, 1, 2]
        assert registry.get("prod").snapshot() == {"i-1": "web-1", "i-2": "web-2", "i-3": "db-1"}
        assert registry.get("dev").get("i-1") == "dev-web"

    def test_all_pages_stored(self, registry, fake_inventory, executor):
        """여러 페이지 응답은 모든 페이지 항목 저장"""
        fake_inventory.add_page("prod", "us-east-1", _record("i-1", "a"), _record("i-2", "b"))
        fake_inventory.add_page("prod", "us-east-1", _record("i-3", "c"))

        snapshot = ConfigSnapshot(accounts=(Account("prod", ("us-east-1",)),))
        result = _orchestrator(snapshot, registry, fake_inventory, executor).refresh_all()

        assert result.get_data() == [3]
        assert registry.get("prod").snapshot() == {"i-1": "a", "i-2": "b", "i-3": "c"}

    def test_untagged_instance_uses_id(self, registry, fake_inventory, executor):
        """이름 태그가 비어 있으면 ID를 이름으로 저장"""
        fake_inventory.add_page("prod", "us-east-1", _record("i-1", ""), _record("i-2"))

        snapshot = ConfigSnapshot(accounts=(Account("prod", ("us-east-1",)),))
        _orchestrator(snapshot, registry, fake_inventory, executor).refresh_all()

        assert registry.get("prod").snapshot() == {"i-1": "i-1", "i-2": "i-2"}

    def test_failure_is_isolated(self, registry, fake_inventory, executor):
        """한 리전의 실패가 다른 리전 결과를 막지 않음"""
        fake_inventory.fail(
            "prod",
            "us-east-1",
            ClientError({"Error": {"Code": "UnauthorizedOperation", "Message": "denied"}}, "DescribeInstances"),
        )
        fake_inventory.add_page("prod", "eu-west-1", _record("i-9", "eu-web"))

        snapshot = ConfigSnapshot(accounts=(Account("prod", ("us-east-1", "eu-west-1")),))
        result = _orchestrator(snapshot, registry, fake_inventory, executor).refresh_all()

        assert result.success_count == 1
        assert result.error_count == 1
        error = result.get_errors()[0]
        assert error.region == "us-east-1"
        assert error.category == ErrorCategory.ACCESS_DENIED
        assert registry.get("prod").get("i-9") == "eu-web"

    def test_timeout_is_isolated(self, registry, fake_inventory):
        """느린 작업은 타임아웃으로 기록되고 나머지 작업은 완료"""
        fake_inventory.delay("prod", "us-east-1", 1.0)
        fake_inventory.add_page("prod", "eu-west-1", _record("i-9", "eu-web"))

        executor = ParallelExecutor(ParallelConfig(max_workers=3, task_timeout=0.2))
        try:
            snapshot = ConfigSnapshot(accounts=(Account("prod", ("us-east-1", "eu-west-1")),))
            result = _orchestrator(snapshot, registry, fake_inventory, executor).refresh_all()
        finally:
            executor.shutdown()

        timeouts = result.get_errors_by_category()[ErrorCategory.TIMEOUT]
        assert len(timeouts) == 1
        assert timeouts[0].region == "us-east-1"
        assert timeouts[0].error_code == "TaskTimeout"
        assert registry.get("prod").get("i-9") == "eu-web"

    def test_no_accounts(self, registry, fake_inventory, executor):
        """계정이 없으면 빈 결과"""
        result = _orchestrator(ConfigSnapshot(), registry, fake_inventory, executor).refresh_all()

        assert result.total_count == 0
        assert fake_inventory.calls == []

    def test_uses_tag_filter(self, registry, fake_inventory, executor):
        """describe 호출에 태그 필터 전달"""
        snapshot = ConfigSnapshot(accounts=(Account("prod", ("us-east-1",)),))
        _orchestrator(snapshot, registry, fake_inventory, executor).refresh_all()

        assert fake_inventory.filters == [TagFilter("tag-key", ("Name",))]
        assert fake_inventory.calls == [("prod", "us-east-1", None)]


class TestRefreshScope:
    """단일 범위 조회 테스트"""

    def test_single_resource(self, registry, fake_inventory, executor):
        """ID 필터로 단건 조회"""
        fake_inventory.add_page("prod", "us-east-1", _record("i-1", "web-1"), _record("i-2", "web-2"))
        account = Account("prod", ("us-east-1",))
        snapshot = ConfigSnapshot(accounts=(account,))
        dictionary = registry.get("prod")

        count = _orchestrator(snapshot, registry, fake_inventory, executor).refresh_scope(
            snapshot, account, "us-east-1", dictionary, resource_ids=("i-2",)
        )

        assert count == 1
        assert dictionary.snapshot() == {"i-2": "web-2"}
        assert fake_inventory.calls == [("prod", "us-east-1", ("i-2",))]

    def test_remote_error_propagates(self, registry, fake_inventory, executor):
        """원격 호출 에러는 호출자에게 전파"""
        fake_inventory.fail("prod", "us-east-1", ConnectionError("boom"))
        account = Account("prod", ("us-east-1",))
        snapshot = ConfigSnapshot(accounts=(account,))

        with pytest.raises(ConnectionError):
            _orchestrator(snapshot, registry, fake_inventory, executor).refresh_scope(
                snapshot, account, "us-east-1", registry.get("prod")
            )

    def test_account_required(self, registry, fake_inventory, executor):
        snapshot = ConfigSnapshot()

        with pytest.raises(ValueError):
            _orchestrator(snapshot, registry, fake_inventory, executor).refresh_scope(
                snapshot, None, "us-east-1", registry.get("prod")
            )
