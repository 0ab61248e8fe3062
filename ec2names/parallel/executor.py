"""
ec2names/parallel/executor.py - 제한된 워커 풀 병렬 실행기

계정 x 리전 작업을 고정 크기 ThreadPoolExecutor에 제출하고,
작업별 타임아웃으로 완료를 기다려 결과를 수집합니다 (fan-out / fan-in).

특징:
- 워커 풀은 실행기 수명 동안 유지 (원격 API 동시성의 유일한 제한 장치)
- 작업 하나의 실패/타임아웃은 다른 작업을 취소하거나 막지 않음
- 타임아웃된 작업은 중단하지 않고 더 이상 기다리지 않을 뿐 (abandon)
- 패스 내 재시도 없음 (다음 주기 패스가 재시도 역할)

Example:
    executor = ParallelExecutor(ParallelConfig(max_workers=3, task_timeout=30))

    tasks = [TaskSpec(identifier="prod", region="us-east-1")]
    result = executor.execute(lambda task: refresh(task.identifier, task.region), tasks)

    print(f"성공: {result.success_count}, 실패: {result.error_count}")
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ec2names.config import settings

from .errors import categorize_error, get_error_code
from .types import ErrorCategory, ParallelExecutionResult, TaskError, TaskResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P")


def _clear_exception_chain(e: BaseException) -> None:
    """traceback + chained exception 메모리 누수 방지"""
    e.__traceback__ = None
    if e.__context__ is not None:
        e.__context__.__traceback__ = None
    if e.__cause__ is not None:
        e.__cause__.__traceback__ = None


@dataclass
class ParallelConfig:
    """병렬 실행 설정

    Attributes:
        max_workers: 최대 동시 스레드 수 (1~20)
        task_timeout: 작업별 완료 대기 시간 (초)
    """

    max_workers: int = settings.MAX_WORKERS
    task_timeout: float = settings.TASK_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_workers > 20:
            self.max_workers = 20
        if self.task_timeout <= 0:
            raise ValueError(f"task_timeout must be > 0, got {self.task_timeout}")


@dataclass
class TaskSpec(Generic[P]):
    """병렬 실행할 개별 작업 명세

    Attributes:
        identifier: 계정 표시 이름
        region: 대상 AWS 리전
        payload: 작업 함수에 넘길 추가 데이터 (계정 설정 등)
    """

    identifier: str
    region: str
    payload: P | None = field(default=None, repr=False)


class ParallelExecutor:
    """고정 크기 워커 풀 실행기

    execute()는 모든 제출 작업이 종료 상태(성공/에러/타임아웃)에 도달할 때까지 블로킹하며,
    예외를 던지지 않습니다.
    """

    def __init__(self, config: ParallelConfig | None = None):
        self.config = config or ParallelConfig()
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="ec2names-worker",
        )
        self._lock = threading.Lock()
        self._closed = False

    def execute(
        self,
        func: Callable[[TaskSpec[Any]], T],
        tasks: Sequence[TaskSpec[Any]],
    ) -> ParallelExecutionResult[T]:
        """작업 함수를 모든 작업에 병렬 실행

        Args:
            func: (TaskSpec) -> T 작업 함수
            tasks: 작업 명세 목록

        Returns:
            ParallelExecutionResult[T]: 전체 실행 결과
        """
        if not tasks:
            logger.warning("실행할 작업이 없습니다")
            return ParallelExecutionResult()

        logger.info(f"병렬 실행 시작: {len(tasks)}개 작업, max_workers={self.config.max_workers}")
        start_time = time.monotonic()

        submitted: list[tuple[TaskSpec[Any], Future[TaskResult[T]]]] = []
        results: list[TaskResult[T]] = []

        with self._lock:
            if self._closed:
                logger.warning("종료된 실행기: 작업을 제출하지 않습니다")
                return ParallelExecutionResult()
            for task in tasks:
                try:
                    submitted.append((task, self._pool.submit(self._execute_single, func, task)))
                except RuntimeError as e:
                    # 인터프리터 종료 중 등 제출 자체가 실패한 경우
                    logger.error(f"작업 제출 실패 [{task.identifier}/{task.region}]: {e}")
                    results.append(self._failure(task, e, 0.0))

        for task, future in submitted:
            results.append(self._wait(task, future))

        total_time = (time.monotonic() - start_time) * 1000
        exec_result = ParallelExecutionResult(results=tuple(results))

        logger.info(
            f"병렬 실행 완료: 성공 {exec_result.success_count}, 실패 {exec_result.error_count}, 총 {total_time:.0f}ms"
        )
        return exec_result

    def _wait(self, task: TaskSpec[Any], future: Future[TaskResult[T]]) -> TaskResult[T]:
        """작업별 타임아웃으로 결과 대기"""
        timeout = self.config.task_timeout
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as e:
            logger.error(f"작업 시간 초과 [{task.identifier}/{task.region}]: {timeout}초")
            return TaskResult(
                identifier=task.identifier,
                region=task.region,
                success=False,
                error=TaskError(
                    identifier=task.identifier,
                    region=task.region,
                    category=ErrorCategory.TIMEOUT,
                    error_code="TaskTimeout",
                    message=f"{timeout}초 내에 완료되지 않음",
                    original_exception=e,
                ),
                duration_ms=timeout * 1000,
            )
        except concurrent.futures.CancelledError as e:
            logger.error(f"작업 취소됨 [{task.identifier}/{task.region}]")
            return self._failure(task, e, 0.0)
        except Exception as e:
            # _execute_single이 예외를 결과로 바꾸므로 여기 도달하면 executor 자체 오류
            logger.error(f"작업 실행 중 예외 [{task.identifier}/{task.region}]: {e}")
            _clear_exception_chain(e)
            return self._failure(task, e, 0.0)

    def _execute_single(self, func: Callable[[TaskSpec[Any]], T], task: TaskSpec[Any]) -> TaskResult[T]:
        """단일 작업 실행 (워커 스레드 내에서 호출)"""
        start_time = time.monotonic()
        try:
            data = func(task)
            return TaskResult(
                identifier=task.identifier,
                region=task.region,
                success=True,
                data=data,
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            logger.error(f"작업 실패 [{task.identifier}/{task.region}]: {get_error_code(e)} - {e}")
            _clear_exception_chain(e)
            return self._failure(task, e, (time.monotonic() - start_time) * 1000)

    @staticmethod
    def _failure(task: TaskSpec[Any], error: BaseException, duration_ms: float) -> TaskResult[Any]:
        return TaskResult(
            identifier=task.identifier,
            region=task.region,
            success=False,
            error=TaskError(
                identifier=task.identifier,
                region=task.region,
                category=categorize_error(error),
                error_code=get_error_code(error),
                message=str(error),
                original_exception=error,
            ),
            duration_ms=duration_ms,
        )

    def shutdown(self, wait: bool = False) -> None:
        """워커 풀 종료 (진행 중인 원격 호출은 중단하지 않음)"""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._pool.shutdown(wait=wait, cancel_futures=True)

    @property
    def closed(self) -> bool:
        return self._closed
