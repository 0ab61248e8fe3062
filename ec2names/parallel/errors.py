"""
ec2names/parallel/errors.py - 에러 분류 및 수집

갱신 작업과 miss-fill 중 발생하는 에러를 분류하고,
호출자에게 전파하지 않는 대신 스레드 세이프하게 기록합니다.

주요 구성 요소:
- categorize_error: 예외를 ErrorCategory로 분류
- get_error_code: 예외에서 에러 코드 추출
- ErrorSeverity / CollectedError: 기록된 에러 정보
- ErrorCollector: 스레드 세이프 에러 수집기

Example:
    collector = ErrorCollector("ec2")

    try:
        refresh_scope(...)
    except Exception as e:
        collector.collect(e, account_name, region, "describe_instances", resource_id=instance_id)

    if collector.has_errors:
        print(collector.get_summary())
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ec2names.exceptions import (
    AccountNotFoundError,
    ValidationError,
    is_access_denied,
    is_not_found,
    is_throttling,
)

from .types import ErrorCategory

logger = logging.getLogger(__name__)


def categorize_error(error: BaseException) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    ClientError의 경우 response에서 에러 코드를 추출하고,
    네트워크/타임아웃 에러는 타입으로 분류합니다.
    """
    if isinstance(error, Exception):
        if is_throttling(error):
            return ErrorCategory.THROTTLING
        if is_access_denied(error):
            return ErrorCategory.ACCESS_DENIED
        if is_not_found(error):
            return ErrorCategory.NOT_FOUND

    if isinstance(error, AccountNotFoundError):
        return ErrorCategory.NOT_FOUND
    if isinstance(error, ValidationError):
        return ErrorCategory.INVALID_REQUEST
    if isinstance(error, concurrent.futures.CancelledError):
        return ErrorCategory.CANCELLED

    response = getattr(error, "response", None)
    if response is not None:
        error_code = response.get("Error", {}).get("Code", "")

        if "Timeout" in error_code:
            return ErrorCategory.TIMEOUT
        if error_code in ("ExpiredToken", "ExpiredTokenException", "RequestExpired"):
            return ErrorCategory.EXPIRED_TOKEN
        if error_code in ("InternalError", "ServiceUnavailable", "Unavailable"):
            return ErrorCategory.SERVICE_ERROR

    # concurrent.futures.TimeoutError는 3.11부터 내장 TimeoutError의 별칭
    if isinstance(error, (TimeoutError, concurrent.futures.TimeoutError)):
        return ErrorCategory.TIMEOUT

    # botocore 연결 오류는 이름으로 판별 (EndpointConnectionError, ConnectTimeoutError 등)
    name = error.__class__.__name__
    if "Timeout" in name:
        return ErrorCategory.TIMEOUT
    if "Connection" in name or isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: BaseException) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ClientError의 경우 response에서 Code를 추출하고,
    그 외에는 예외 클래스명을 반환합니다.
    """
    response = getattr(error, "response", None)
    if response is not None:
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


class ErrorSeverity(Enum):
    """에러 심각도 분류"""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"


@dataclass
class CollectedError:
    """수집된 에러 상세 정보

    Attributes:
        timestamp: 에러 발생 시각
        account_name: 계정 표시 이름
        region: AWS 리전
        service: AWS 서비스 이름
        operation: 작업 이름 (예: "miss_fill")
        error_code: 에러 코드
        error_message: 에러 메시지
        severity: 에러 심각도
        category: 에러 카테고리
        resource_id: 관련 리소스 ID (선택사항)
    """

    timestamp: datetime
    account_name: str
    region: str
    service: str
    operation: str
    error_code: str
    error_message: str
    severity: ErrorSeverity
    category: ErrorCategory
    resource_id: str | None = None

    def __str__(self) -> str:
        loc = f"{self.account_name}/{self.region}"
        suffix = f" ({self.resource_id})" if self.resource_id else ""
        return f"[{self.severity.value.upper()}] {loc} - {self.service}.{self.operation}: {self.error_code}{suffix}"


class ErrorCollector:
    """스레드 세이프 에러 수집기

    resolve()는 예외를 호출자에게 던지지 않으므로, 실패는 여기에 기록되고 로그로 남습니다.
    max_errors를 넘으면 가장 오래된 항목부터 버립니다.
    """

    def __init__(self, service: str, max_errors: int = 1000):
        self.service = service
        self.max_errors = max_errors
        self._errors: list[CollectedError] = []
        self._lock = threading.Lock()

    def collect(
        self,
        error: BaseException,
        account_name: str,
        region: str,
        operation: str,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
        resource_id: str | None = None,
    ) -> CollectedError:
        """예외를 분류하여 수집하고 로깅

        ACCESS_DENIED는 심각도를 INFO로 낮춥니다.
        """
        category = categorize_error(error)
        if category == ErrorCategory.ACCESS_DENIED:
            severity = ErrorSeverity.INFO

        response = getattr(error, "response", None)
        if response is not None:
            message = response.get("Error", {}).get("Message", str(error))
        else:
            message = str(error)

        collected = CollectedError(
            timestamp=datetime.now(),
            account_name=account_name,
            region=region,
            service=self.service,
            operation=operation,
            error_code=get_error_code(error),
            error_message=message,
            severity=severity,
            category=category,
            resource_id=resource_id,
        )

        with self._lock:
            self._errors.append(collected)
            overflow = len(self._errors) - self.max_errors
            if overflow > 0:
                del self._errors[:overflow]

        log_msg = f"{collected} - {message}"
        if severity == ErrorSeverity.CRITICAL:
            logger.error(log_msg)
        elif severity == ErrorSeverity.WARNING:
            logger.warning(log_msg)
        elif severity == ErrorSeverity.INFO:
            logger.info(log_msg)
        else:
            logger.debug(log_msg)

        return collected

    @property
    def errors(self) -> list[CollectedError]:
        """수집된 모든 에러의 복사본 반환"""
        with self._lock:
            return list(self._errors)

    @property
    def has_errors(self) -> bool:
        with self._lock:
            return len(self._errors) > 0

    def get_summary(self) -> str:
        """심각도별 에러 건수 요약 (예: "에러 3건 (info: 1건, warning: 2건)")"""
        with self._lock:
            if not self._errors:
                return "에러 없음"

            by_severity: dict[str, int] = {}
            for e in self._errors:
                by_severity[e.severity.value] = by_severity.get(e.severity.value, 0) + 1

            parts = [f"{k}: {v}건" for k, v in sorted(by_severity.items())]
            return f"에러 {len(self._errors)}건 ({', '.join(parts)})"
