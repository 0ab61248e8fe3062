"""
ec2names/names - 인스턴스 이름 캐시

주요 구성 요소:
- NameDictionary / NameDictionaryRegistry: 계정별 ID -> 이름 사전
- extract_name: 태그에서 이름 추출
- RefreshOrchestrator: 계정 x 리전 갱신 패스
- LookupService: 캐시 우선 조회 + miss-fill + self-identity fallback
- RefreshScheduler: 주기 갱신 타이머
- InstanceNameProvider: 위 구성 요소를 묶는 서비스
"""

from .dictionary import NameDictionary, NameDictionaryRegistry
from .extraction import extract_name
from .lookup import LookupService
from .provider import InstanceNameProvider
from .refresh import ClientFactory, RefreshOrchestrator, build_tag_filter
from .scheduler import RefreshScheduler

__all__ = [
    "NameDictionary",
    "NameDictionaryRegistry",
    "extract_name",
    "LookupService",
    "InstanceNameProvider",
    "RefreshOrchestrator",
    "ClientFactory",
    "build_tag_filter",
    "RefreshScheduler",
]
