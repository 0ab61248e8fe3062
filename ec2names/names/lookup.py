"""
ec2names/names/lookup.py - 인스턴스 이름 조회 서비스

메트릭 보고 hot path에서 호출되는 resolve()를 제공합니다.

조회 순서:
    1. 이름 해석 비활성 → ID 그대로 반환 (캐시 접근 없음)
    2. 계정 사전에 값이 있으면 반환
    3. 캐시 미스 → 해당 (계정, 리전, ID) 범위로 동기 miss-fill
    4. 그래도 없으면 ID 자신을 이름으로 저장하고 반환 (self-identity fallback)

resolve()는 예외를 던지지 않습니다. 최악의 경우 ID를 그대로 반환합니다.
"""

from __future__ import annotations

import logging

from ec2names.config import SnapshotHolder, is_blank
from ec2names.exceptions import AccountNotFoundError
from ec2names.parallel import ErrorCollector, ErrorSeverity

from .dictionary import NameDictionary, NameDictionaryRegistry
from .refresh import RefreshOrchestrator

logger = logging.getLogger(__name__)


class LookupService:
    """캐시 우선 이름 조회기"""

    def __init__(
        self,
        holder: SnapshotHolder,
        registry: NameDictionaryRegistry,
        orchestrator: RefreshOrchestrator,
        errors: ErrorCollector | None = None,
    ):
        self._holder = holder
        self._registry = registry
        self._orchestrator = orchestrator
        self._errors = errors or ErrorCollector("ec2")

    @property
    def errors(self) -> ErrorCollector:
        return self._errors

    def resolve(self, account_name: str, region: str, resource_id: str) -> str:
        """인스턴스 이름 조회

        Args:
            account_name: 계정 표시 이름
            region: AWS 리전
            resource_id: 인스턴스 ID

        Returns:
            인스턴스 이름 (찾지 못하면 resource_id)
        """
        snapshot = self._holder.get()
        if not snapshot.names.enabled:
            return resource_id

        dictionary: NameDictionary | None = None
        try:
            dictionary = self._registry.get(account_name)
            name = dictionary.get(resource_id)
            if not is_blank(name):
                return name or resource_id

            self._miss_fill(account_name, region, resource_id, dictionary)

            name = dictionary.get(resource_id)
            if is_blank(name):
                logger.debug(f"인스턴스 이름 없음, ID 사용: {resource_id}")
                dictionary.put(resource_id, resource_id)
                return resource_id
            return name or resource_id

        except Exception as e:
            # 사전 자체 접근 실패 등 예상 밖 오류도 ID로 대체
            self._errors.collect(e, account_name, region, "resolve", ErrorSeverity.CRITICAL, resource_id)
            if dictionary is not None:
                self._store_fallback(dictionary, resource_id)
            return resource_id

    def _store_fallback(self, dictionary: NameDictionary, resource_id: str) -> None:
        """예상 밖 오류 후에도 ID를 이름으로 저장 (저장 실패는 로그만)"""
        try:
            if is_blank(dictionary.get(resource_id)):
                dictionary.put(resource_id, resource_id)
        except Exception:
            logger.exception(f"ID 대체 저장 실패: {resource_id}")

    def _miss_fill(self, account_name: str, region: str, resource_id: str, dictionary: NameDictionary) -> None:
        """단일 리소스 동기 조회 (실패는 기록만 하고 전파하지 않음)

        호출자 스레드에서 실행되므로 재시도 없이 단일 시도, 짧은 읽기 타임아웃을 사용합니다.
        """
        try:
            snapshot = self._holder.get()
            account = snapshot.find_account(account_name)
            if account is None:
                raise AccountNotFoundError(account_name)
            self._orchestrator.refresh_scope(
                snapshot.for_single_lookup(),
                account,
                region,
                dictionary,
                resource_ids=(resource_id,),
            )
        except Exception as e:
            self._errors.collect(e, account_name, region, "miss_fill", ErrorSeverity.WARNING, resource_id)
