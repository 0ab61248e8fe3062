"""
ec2names/config.py - 설정 및 구성 데이터

프로세스 전역 상수(Settings), 로깅 설정(LogConfig),
이름 캐시 구성 스냅샷(ConfigSnapshot)과 이를 원자적으로 교체하는 SnapshotHolder를 정의합니다.

구성 스냅샷은 불변(frozen)이며, 재초기화 시 통째로 교체됩니다.
읽는 쪽은 항상 완전한 스냅샷(이전 또는 새 것)을 보며, 필드가 섞이지 않습니다.

Example:
    from ec2names.config import SnapshotHolder, load_config

    holder = SnapshotHolder()
    holder.set(load_config("config.yml"))
    snapshot = holder.get()
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .exceptions import AccountValidationError, ConfigError

logger = logging.getLogger(__name__)


# =============================================================================
# 환경변수 헬퍼
# =============================================================================

def get_env_int(name: str, default: int) -> int:
    """환경변수를 int로 변환 (유효하지 않으면 기본값)"""
    value = os.environ.get(name)
    if value is None:
        return default

    try:
        return int(value)
    except ValueError:
        logger.debug("정수 변환 실패 (%s=%r), 기본값 %s 사용", name, value, default)
        return default


# =============================================================================
# 전역 설정
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """프로세스 전역 설정 (불변)

    Attributes:
        REFRESH_INTERVAL_SECONDS: 주기적 갱신 간격 (초)
        TASK_TIMEOUT_SECONDS: 계정/리전 갱신 작업별 대기 타임아웃 (초)
        MAX_WORKERS: 갱신 워커 풀 크기 (API 쓰로틀링 기준, CPU 수와 무관)
        DEFAULT_MAX_RETRY_SIZE: botocore 최대 시도 횟수 기본값
        API_CONNECT_TIMEOUT: 연결 타임아웃 (초)
        API_READ_TIMEOUT: 읽기 타임아웃 (초)
        MISS_FILL_READ_TIMEOUT: miss-fill 읽기 타임아웃 (초, 재시도 없음)
        DEFAULT_TAG_KEY: 이름으로 사용할 태그 키
        DEFAULT_TAG_FILTER_NAME: describe_instances 필터 이름
    """

    REFRESH_INTERVAL_SECONDS: int = 300
    TASK_TIMEOUT_SECONDS: int = 30
    MAX_WORKERS: int = 3
    DEFAULT_MAX_RETRY_SIZE: int = 3
    API_CONNECT_TIMEOUT: int = 10
    API_READ_TIMEOUT: int = 30
    MISS_FILL_READ_TIMEOUT: int = 5
    DEFAULT_TAG_KEY: str = "Name"
    DEFAULT_TAG_FILTER_NAME: str = "tag-key"

    @classmethod
    def from_env(cls) -> Settings:
        """EC2NAMES_* 환경변수로 기본값 덮어쓰기"""
        defaults = cls()
        return cls(
            REFRESH_INTERVAL_SECONDS=get_env_int("EC2NAMES_REFRESH_INTERVAL", defaults.REFRESH_INTERVAL_SECONDS),
            TASK_TIMEOUT_SECONDS=get_env_int("EC2NAMES_TASK_TIMEOUT", defaults.TASK_TIMEOUT_SECONDS),
            MAX_WORKERS=get_env_int("EC2NAMES_MAX_WORKERS", defaults.MAX_WORKERS),
            DEFAULT_MAX_RETRY_SIZE=get_env_int("EC2NAMES_MAX_RETRY_SIZE", defaults.DEFAULT_MAX_RETRY_SIZE),
            API_CONNECT_TIMEOUT=get_env_int("EC2NAMES_CONNECT_TIMEOUT", defaults.API_CONNECT_TIMEOUT),
            API_READ_TIMEOUT=get_env_int("EC2NAMES_READ_TIMEOUT", defaults.API_READ_TIMEOUT),
            MISS_FILL_READ_TIMEOUT=get_env_int("EC2NAMES_MISS_FILL_TIMEOUT", defaults.MISS_FILL_READ_TIMEOUT),
        )


settings = Settings.from_env()


@dataclass
class LogConfig:
    """로깅 설정"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_env(cls) -> LogConfig:
        """LOG_LEVEL, LOG_FORMAT 환경변수에서 로드"""
        defaults = cls()
        return cls(
            level=os.environ.get("LOG_LEVEL", defaults.level).upper(),
            format=os.environ.get("LOG_FORMAT", defaults.format),
        )


# =============================================================================
# 구성 데이터
# =============================================================================


def is_blank(value: str | None) -> bool:
    """None, 빈 문자열, 공백 문자열이면 True"""
    return value is None or not value.strip()


@dataclass(frozen=True)
class Account:
    """모니터링 대상 AWS 계정

    Attributes:
        display_name: 계정 표시 이름 (조회 시 대소문자 무시)
        regions: 대상 리전 목록 (순서 유지)
        access_key: AWS 액세스 키 (None이면 기본 자격 증명 체인)
        secret_key: AWS 시크릿 키
    """

    display_name: str
    regions: tuple[str, ...] = ()
    access_key: str | None = field(default=None, repr=False)
    secret_key: str | None = field(default=None, repr=False)

    def matches(self, name: str | None) -> bool:
        """표시 이름 비교 (대소문자 무시, 표시 이름이 빈 계정은 어떤 이름과도 불일치)"""
        if name is None or is_blank(self.display_name):
            return False
        return self.display_name.lower() == name.lower()

    @property
    def has_static_credentials(self) -> bool:
        return not is_blank(self.access_key) and not is_blank(self.secret_key)


def validate_account(account: Account) -> None:
    """계정 설정 검증

    Raises:
        AccountValidationError: 표시 이름/리전이 없거나 키가 한쪽만 있는 경우
    """
    name = account.display_name
    if is_blank(name):
        raise AccountValidationError(str(name), "display_name", name, "비어있지 않은 문자열")

    if not account.regions or any(is_blank(r) for r in account.regions):
        raise AccountValidationError(name, "regions", list(account.regions), "하나 이상의 리전")

    if is_blank(account.access_key) != is_blank(account.secret_key):
        raise AccountValidationError(name, "credentials", "<partial>", "access_key와 secret_key 모두 또는 모두 생략")


@dataclass(frozen=True)
class CredentialsDecryptionConfig:
    """자격 증명 복호화 설정"""

    enabled: bool = False
    encryption_key: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class ProxyConfig:
    """HTTP 프록시 설정"""

    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = field(default=None, repr=False)

    @property
    def enabled(self) -> bool:
        return not is_blank(self.host)

    def to_botocore_proxies(self) -> dict[str, str] | None:
        """botocore Config(proxies=...) 형식으로 변환

        Returns:
            {"http": url, "https": url} 또는 프록시 미설정 시 None
        """
        if not self.enabled:
            return None

        auth = ""
        if not is_blank(self.username):
            auth = self.username or ""
            if not is_blank(self.password):
                auth = f"{auth}:{self.password}"
            auth = f"{auth}@"

        url = f"http://{auth}{self.host}"
        if self.port:
            url = f"{url}:{self.port}"
        return {"http": url, "https": url}


@dataclass(frozen=True)
class NameResolutionConfig:
    """인스턴스 이름 해석 설정

    Attributes:
        enabled: False이면 resolve()는 ID를 그대로 반환
        tag_key: 이름으로 사용할 태그 키
        tag_filter_name: describe 필터 이름 (빈 값이면 필터 없음)
        endpoint_template: 리전 엔드포인트 템플릿 ("{region}" 치환).
            None이면 botocore 기본 엔드포인트 해석 사용 (파티션 자동 처리)
    """

    enabled: bool = False
    tag_key: str = "Name"
    tag_filter_name: str | None = "tag-key"
    endpoint_template: str | None = None

    def endpoint_for(self, region: str) -> str | None:
        if is_blank(self.endpoint_template):
            return None
        return (self.endpoint_template or "").format(region=region)


@dataclass(frozen=True)
class ConfigSnapshot:
    """원자적으로 교체되는 구성 묶음"""

    accounts: tuple[Account, ...] = ()
    decryption: CredentialsDecryptionConfig = field(default_factory=CredentialsDecryptionConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    names: NameResolutionConfig = field(default_factory=NameResolutionConfig)
    max_retry_size: int = settings.DEFAULT_MAX_RETRY_SIZE
    read_timeout: int = settings.API_READ_TIMEOUT

    def find_account(self, name: str) -> Account | None:
        """표시 이름으로 계정 조회 (대소문자 무시)"""
        for account in self.accounts:
            if account.matches(name):
                return account
        return None

    def for_single_lookup(self) -> ConfigSnapshot:
        """miss-fill용 스냅샷 (단일 시도, 짧은 읽기 타임아웃)

        resolve() 호출자의 최대 대기는 연결 타임아웃 + MISS_FILL_READ_TIMEOUT 입니다.
        """
        return replace(self, max_retry_size=1, read_timeout=settings.MISS_FILL_READ_TIMEOUT)


class SnapshotHolder:
    """ConfigSnapshot 단일 슬롯 홀더

    get()은 락 없이 현재 참조를 반환하고, set()은 락 안에서 참조를 교체하며 버전을 올립니다.
    """

    def __init__(self, snapshot: ConfigSnapshot | None = None):
        self._snapshot = snapshot or ConfigSnapshot()
        self._version = 0
        self._lock = threading.Lock()

    def get(self) -> ConfigSnapshot:
        return self._snapshot

    def set(self, snapshot: ConfigSnapshot) -> int:
        """스냅샷 교체

        Returns:
            새 버전 번호
        """
        with self._lock:
            self._snapshot = snapshot
            self._version += 1
            return self._version


# =============================================================================
# YAML 로드
# =============================================================================


def _parse_account(raw: dict[str, Any]) -> Account:
    regions = raw.get("regions") or ()
    if isinstance(regions, str):
        regions = (regions,)
    return Account(
        display_name=str(raw.get("display_name") or ""),
        regions=tuple(str(r) for r in regions),
        access_key=raw.get("access_key"),
        secret_key=raw.get("secret_key"),
    )


def parse_config(data: dict[str, Any]) -> ConfigSnapshot:
    """딕셔너리(YAML 파싱 결과)를 ConfigSnapshot으로 변환

    Raises:
        ConfigError: 구조가 올바르지 않은 경우
    """
    if not isinstance(data, dict):
        raise ConfigError("<root>", "최상위는 매핑이어야 합니다")

    raw_accounts = data.get("accounts") or []
    if not isinstance(raw_accounts, list):
        raise ConfigError("accounts", "리스트여야 합니다")

    decryption = data.get("credentials_decryption") or {}
    proxy = data.get("proxy") or {}
    names = data.get("instance_name") or {}

    try:
        return ConfigSnapshot(
            accounts=tuple(_parse_account(a) for a in raw_accounts),
            decryption=CredentialsDecryptionConfig(
                enabled=bool(decryption.get("enabled", False)),
                encryption_key=decryption.get("encryption_key"),
            ),
            proxy=ProxyConfig(
                host=proxy.get("host"),
                port=int(proxy["port"]) if proxy.get("port") else None,
                username=proxy.get("username"),
                password=proxy.get("password"),
            ),
            names=NameResolutionConfig(
                enabled=bool(names.get("enabled", False)),
                tag_key=names.get("tag_key") or settings.DEFAULT_TAG_KEY,
                tag_filter_name=names.get("tag_filter_name", settings.DEFAULT_TAG_FILTER_NAME),
                endpoint_template=names.get("endpoint_template"),
            ),
            max_retry_size=int(data.get("max_retry_size", settings.DEFAULT_MAX_RETRY_SIZE)),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError("<root>", "설정 값 형식이 올바르지 않습니다", cause=e) from e


def load_config(path: str | Path) -> ConfigSnapshot:
    """YAML 설정 파일 로드

    Raises:
        ConfigError: 파일이 없거나 파싱에 실패한 경우
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(str(path), "설정 파일을 읽을 수 없습니다", cause=e) from e
    except yaml.YAMLError as e:
        raise ConfigError(str(path), "YAML 파싱 실패", cause=e) from e

    snapshot = parse_config(data)
    logger.debug("설정 로드 완료: %s (계정 %d개)", path, len(snapshot.accounts))
    return snapshot
