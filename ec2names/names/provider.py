"""
ec2names/names/provider.py - 인스턴스 이름 제공자 (composition root)

애플리케이션이 명시적으로 생성해 참조로 전달하는 서비스 인스턴스입니다.
프로세스 전역 싱글턴 접근자는 두지 않습니다.

수명 주기:
    1. initialise(): 구성 스냅샷 교체. 이름 해석이 활성인 첫 호출에서만
       동기 전체 갱신 1회 후 주기 스케줄러 시작 (이후 호출은 스냅샷만 교체)
    2. resolve(): hot path 이름 조회
    3. close(): 스케줄러 중지, 워커 풀 종료

Example:
    with InstanceNameProvider() as provider:
        provider.initialise(accounts, decryption, proxy, name_config, max_retry_size=3)
        name = provider.resolve("prod", "ap-northeast-2", "i-0123456789abcdef0")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from ec2names.auth import CredentialsProvider, Decryptor
from ec2names.config import (
    Account,
    ConfigSnapshot,
    CredentialsDecryptionConfig,
    NameResolutionConfig,
    ProxyConfig,
    SnapshotHolder,
    settings,
)
from ec2names.inventory import InventoryClient, create_inventory_client
from ec2names.parallel import (
    CollectedError,
    ErrorCollector,
    ParallelConfig,
    ParallelExecutionResult,
    ParallelExecutor,
)

from .dictionary import NameDictionaryRegistry
from .lookup import LookupService
from .refresh import ClientFactory, RefreshOrchestrator
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class InstanceNameProvider:
    """EC2 인스턴스 이름 캐시 서비스

    Args:
        client_factory: (account, region, snapshot) -> InventoryClient.
            None이면 boto3 EC2 클라이언트를 사용
        decryptor: 자격 증명 복호화 함수 (복호화 활성 시 필요)
        parallel_config: 워커 수 / 작업별 타임아웃
        refresh_interval: 주기 갱신 간격 (초)
    """

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        decryptor: Decryptor | None = None,
        parallel_config: ParallelConfig | None = None,
        refresh_interval: float = settings.REFRESH_INTERVAL_SECONDS,
    ):
        self._credentials = CredentialsProvider(decryptor)
        self._holder = SnapshotHolder()
        self._registry = NameDictionaryRegistry()
        self._errors = ErrorCollector("ec2")
        self._executor = ParallelExecutor(parallel_config)
        self._orchestrator = RefreshOrchestrator(
            self._holder,
            self._registry,
            client_factory or self._default_client_factory,
            self._executor,
        )
        self._lookup = LookupService(self._holder, self._registry, self._orchestrator, self._errors)
        self._scheduler = RefreshScheduler(self._orchestrator.refresh_all, refresh_interval)

        self._init_lock = threading.Lock()
        self._initialised = False

    def _default_client_factory(self, account: Account, region: str, snapshot: ConfigSnapshot) -> InventoryClient:
        return create_inventory_client(self._credentials, account, region, snapshot)

    def initialise(
        self,
        accounts: Sequence[Account],
        decryption_config: CredentialsDecryptionConfig | None = None,
        proxy_config: ProxyConfig | None = None,
        name_config: NameResolutionConfig | None = None,
        max_retry_size: int = settings.DEFAULT_MAX_RETRY_SIZE,
    ) -> None:
        """구성 교체 및 최초 1회 초기화"""
        self.apply(
            ConfigSnapshot(
                accounts=tuple(accounts),
                decryption=decryption_config or CredentialsDecryptionConfig(),
                proxy=proxy_config or ProxyConfig(),
                names=name_config or NameResolutionConfig(),
                max_retry_size=max_retry_size,
            )
        )

    def apply(self, snapshot: ConfigSnapshot) -> None:
        """이미 만들어진 스냅샷으로 initialise()와 동일하게 동작"""
        version = self._holder.set(snapshot)
        logger.debug(f"구성 스냅샷 교체 (version={version}, 계정 {len(snapshot.accounts)}개)")

        if not snapshot.names.enabled:
            return

        with self._init_lock:
            if self._initialised:
                return
            self._initialised = True

        logger.info("EC2 인스턴스 이름 초기화 중...")
        self._orchestrator.refresh_all()
        self._scheduler.start()

    def resolve(self, account_name: str, region: str, instance_id: str) -> str:
        """인스턴스 이름 조회 (예외를 던지지 않음)"""
        return self._lookup.resolve(account_name, region, instance_id)

    def refresh_all(self) -> ParallelExecutionResult[int]:
        """수동 전체 갱신 패스"""
        return self._orchestrator.refresh_all()

    @property
    def registry(self) -> NameDictionaryRegistry:
        return self._registry

    @property
    def snapshot(self) -> ConfigSnapshot:
        return self._holder.get()

    @property
    def errors(self) -> list[CollectedError]:
        return self._errors.errors

    @property
    def error_summary(self) -> str:
        """resolve 중 기록된 에러의 심각도별 요약"""
        return self._errors.get_summary()

    @property
    def is_initialised(self) -> bool:
        return self._initialised

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    def close(self) -> None:
        """스케줄러 중지 및 워커 풀 종료"""
        self._scheduler.stop(timeout=settings.TASK_TIMEOUT_SECONDS)
        self._executor.shutdown(wait=False)

    def __enter__(self) -> InstanceNameProvider:
        return self

    def __exit__(self, *args) -> None:
        self.close()
