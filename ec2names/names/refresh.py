"""
ec2names/names/refresh.py - 갱신 오케스트레이터

설정된 모든 계정 x 리전에 대해 전체 갱신 작업을 제한된 워커 풀로 fan-out 하고,
작업별 타임아웃으로 완료를 기다립니다.

정책:
- 잘못된 계정 설정은 경고 로그 후 건너뜀 (패스 전체를 중단하지 않음)
- 작업 실패/타임아웃은 해당 작업에만 격리 (다른 작업을 취소하지 않음)
- 모든 제출 작업이 종료 상태에 도달하면 패스 완료 (전부 성공일 필요 없음)
- 패스 내 재시도 없음 (다음 주기 패스가 재시도 역할)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ec2names.config import Account, ConfigSnapshot, SnapshotHolder, is_blank, validate_account
from ec2names.exceptions import AccountValidationError
from ec2names.inventory import InventoryClient, TagFilter
from ec2names.parallel import ParallelExecutionResult, ParallelExecutor, TaskSpec

from .dictionary import NameDictionary, NameDictionaryRegistry
from .extraction import extract_name

logger = logging.getLogger(__name__)

# (account, region, snapshot) -> InventoryClient
ClientFactory = Callable[[Account, str, ConfigSnapshot], InventoryClient]


def build_tag_filter(snapshot: ConfigSnapshot) -> TagFilter | None:
    """설정의 필터 이름/태그 키로 describe 필터 생성 (필터 이름이 비면 None)"""
    names = snapshot.names
    if is_blank(names.tag_filter_name):
        return None
    return TagFilter.of(names.tag_filter_name or "", [names.tag_key])


class RefreshOrchestrator:
    """계정 x 리전 갱신 패스 실행기

    Example:
        orchestrator = RefreshOrchestrator(holder, registry, client_factory, ParallelExecutor())
        result = orchestrator.refresh_all()
        if result.has_any_failure():
            logger.warning(result.get_error_summary())
    """

    def __init__(
        self,
        holder: SnapshotHolder,
        registry: NameDictionaryRegistry,
        client_factory: ClientFactory,
        executor: ParallelExecutor,
    ):
        self._holder = holder
        self._registry = registry
        self._client_factory = client_factory
        self._executor = executor

    def refresh_all(self) -> ParallelExecutionResult[int]:
        """전체 갱신 패스 (예외를 던지지 않음)

        Returns:
            작업별 결과 (성공 시 data는 저장한 이름 수)
        """
        logger.info("EC2 인스턴스 이름 갱신 시작...")
        snapshot = self._holder.get()
        tasks = self.build_tasks(snapshot)

        result = self._executor.execute(
            lambda task: self.refresh_scope(
                snapshot,
                task.payload,
                task.region,
                self._registry.get(task.identifier),
            ),
            tasks,
        )

        if result.has_any_failure():
            logger.warning(result.get_error_summary())
        return result

    def build_tasks(self, snapshot: ConfigSnapshot) -> list[TaskSpec[Account]]:
        """유효한 계정의 리전별 작업 목록 생성"""
        tasks: list[TaskSpec[Account]] = []

        for account in snapshot.accounts:
            try:
                validate_account(account)
            except AccountValidationError as e:
                logger.warning(f"계정 작업 생성 건너뜀: {e}")
                continue

            # 사전은 작업 제출 전에 만들어 둠
            self._registry.get(account.display_name)
            for region in account.regions:
                tasks.append(TaskSpec(identifier=account.display_name, region=region, payload=account))

        return tasks

    def refresh_scope(
        self,
        snapshot: ConfigSnapshot,
        account: Account | None,
        region: str,
        dictionary: NameDictionary,
        resource_ids: Sequence[str] = (),
    ) -> int:
        """단일 (계정, 리전) 조회 후 이름 저장

        갱신 작업과 miss-fill이 공유합니다. 원격 호출 에러는 그대로 전파합니다.

        Returns:
            저장한 이름 수
        """
        if account is None:
            raise ValueError("account is required")

        client = self._client_factory(account, region, snapshot)
        tag_key = snapshot.names.tag_key

        # 원격 페이지 순회가 끝난 뒤 한 번에 저장 (사전 락을 네트워크 대기 동안 잡지 않음)
        entries = [
            (record.resource_id, extract_name(record.resource_id, record.tags, tag_key))
            for record in client.describe(build_tag_filter(snapshot), resource_ids or None)
        ]
        count = dictionary.put_many(entries)

        logger.debug(f"[{account.display_name}/{region}] 이름 {count}개 저장")
        return count
