"""
ec2names/parallel/types.py - 병렬 실행 결과 타입

갱신 패스의 계정/리전 작업별 결과(TaskResult)와
전체 패스 결과(ParallelExecutionResult)를 정의합니다.

실패한 작업도 결과의 일부로 기록되며, 하나의 실패가 다른 작업을 취소하지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCategory(Enum):
    """작업 실패 원인 분류"""

    THROTTLING = "throttling"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    TIMEOUT = "timeout"
    EXPIRED_TOKEN = "expired_token"
    INVALID_REQUEST = "invalid_request"
    SERVICE_ERROR = "service_error"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclass
class TaskError:
    """작업 실패 정보

    Attributes:
        identifier: 계정 표시 이름
        region: AWS 리전
        category: 에러 카테고리
        error_code: AWS 에러 코드 또는 예외 클래스명
        message: 에러 메시지
        original_exception: 원본 예외 (traceback은 제거된 상태)
    """

    identifier: str
    region: str
    category: ErrorCategory
    error_code: str
    message: str
    original_exception: BaseException | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.identifier}/{self.region}] {self.error_code}: {self.message}"


@dataclass
class TaskResult(Generic[T]):
    """단일 계정/리전 작업 결과"""

    identifier: str
    region: str
    success: bool
    data: T | None = None
    error: TaskError | None = None
    duration_ms: float = 0.0

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{self.identifier}/{self.region}] {status} ({self.duration_ms:.0f}ms)"


@dataclass
class ParallelExecutionResult(Generic[T]):
    """갱신 패스 전체 결과

    모든 제출 작업이 종료 상태(성공/실패/타임아웃)에 도달하면 패스가 끝난 것으로 봅니다.
    """

    results: tuple[TaskResult[T], ...] | list[TaskResult[T]] = ()

    @property
    def successful(self) -> list[TaskResult[T]]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[TaskResult[T]]:
        return [r for r in self.results if not r.success]

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def error_count(self) -> int:
        return len(self.failed)

    def has_any_failure(self) -> bool:
        return self.error_count > 0

    def get_data(self) -> list[T]:
        """성공한 작업의 데이터 (None 제외)"""
        return [r.data for r in self.results if r.success and r.data is not None]

    def get_errors(self) -> list[TaskError]:
        return [r.error for r in self.results if r.error is not None]

    def get_errors_by_category(self) -> dict[ErrorCategory, list[TaskError]]:
        grouped: dict[ErrorCategory, list[TaskError]] = {}
        for error in self.get_errors():
            grouped.setdefault(error.category, []).append(error)
        return grouped

    def get_error_summary(self) -> str:
        """카테고리별 실패 요약 문자열"""
        errors = self.get_errors()
        if not errors:
            return "실패한 작업 없음"

        lines = [f"총 {len(errors)}개 작업 실패"]
        for category, items in self.get_errors_by_category().items():
            locations = ", ".join(f"{e.identifier}/{e.region}" for e in items)
            lines.append(f"  [{category.value}] {len(items)}건: {locations}")
        return "\n".join(lines)
