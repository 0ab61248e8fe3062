"""
ec2names/names/scheduler.py - 주기적 갱신 스케줄러

단일 데몬 타이머 스레드가 고정 주기(fixed-rate)로 작업을 실행합니다.
첫 실행은 start() 후 한 주기 뒤이며, stop()으로 명시적으로 종료합니다.
실행 중 예외는 로그만 남기고 다음 주기를 계속합니다.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """고정 주기 백그라운드 실행기

    Example:
        scheduler = RefreshScheduler(orchestrator.refresh_all, interval_seconds=300)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(self, task: Callable[[], object], interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        self._task = task
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._runs = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def run_count(self) -> int:
        """완료된 실행 횟수"""
        with self._lock:
            return self._runs

    def start(self) -> bool:
        """스케줄 시작 (이미 시작했으면 아무 것도 하지 않음)

        Returns:
            이번 호출로 시작했으면 True
        """
        with self._lock:
            if self._thread is not None:
                return False
            logger.info(f"백그라운드 갱신 작업 시작 (주기 {self._interval}초)")
            self._thread = threading.Thread(target=self._loop, name="ec2names-scheduler", daemon=True)
            self._thread.start()
            return True

    def stop(self, timeout: float | None = None) -> None:
        """중지 신호를 보내고 타이머 스레드 종료 대기

        진행 중인 실행은 끝날 때까지 기다립니다 (timeout 지정 시 그만큼만).
        """
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _loop(self) -> None:
        next_run = time.monotonic() + self._interval
        while not self._stop.wait(max(0.0, next_run - time.monotonic())):
            try:
                self._task()
            except Exception:
                logger.exception("백그라운드 갱신 실패")
            with self._lock:
                self._runs += 1

            # 실행이 주기보다 길어지면 밀린 실행을 몰아서 하지 않고 다음 주기로 맞춤
            next_run += self._interval
            now = time.monotonic()
            if next_run < now:
                next_run = now + self._interval

        logger.info("백그라운드 갱신 작업 종료")
