"""
ec2names/parallel - 병렬 처리 모듈

멀티 계정/리전 갱신 작업을 제한된 워커 풀에서 병렬로 안전하게 처리합니다.

주요 구성 요소:
- ParallelExecutor: 고정 크기 워커 풀 fan-out / fan-in 실행기
- ErrorCollector: 스레드 세이프 에러 수집기
- get_client: retry/타임아웃/프록시가 설정된 boto3 client

Example:
    from ec2names.parallel import ParallelConfig, ParallelExecutor, TaskSpec

    executor = ParallelExecutor(ParallelConfig(max_workers=3))
    result = executor.execute(refresh_func, [TaskSpec("prod", "us-east-1")])

    if result.error_count > 0:
        print(result.get_error_summary())
"""

from .client import get_client
from .errors import (
    CollectedError,
    ErrorCollector,
    ErrorSeverity,
    categorize_error,
    get_error_code,
)
from .executor import ParallelConfig, ParallelExecutor, TaskSpec
from .types import ErrorCategory, ParallelExecutionResult, TaskError, TaskResult

__all__: list[str] = [
    # Executor
    "ParallelExecutor",
    "ParallelConfig",
    "TaskSpec",
    # Client
    "get_client",
    # Error handling
    "ErrorCollector",
    "ErrorSeverity",
    "CollectedError",
    "categorize_error",
    "get_error_code",
    # Types
    "ErrorCategory",
    "TaskError",
    "TaskResult",
    "ParallelExecutionResult",
]
