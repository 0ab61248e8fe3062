"""
tests/parallel/test_parallel_types.py - 병렬 실행 결과 타입 테스트
"""

import pytest

from ec2names.parallel import ErrorCategory, ParallelExecutionResult, TaskError, TaskResult


def _error(identifier="prod", region="us-east-1", category=ErrorCategory.UNKNOWN, code="Boom"):
    return TaskError(identifier=identifier, region=region, category=category, error_code=code, message="failed")


class TestTaskError:
    """TaskError 테스트"""

    def test_str(self):
        assert str(_error(code="Throttling")) == "[prod/us-east-1] Throttling: failed"


class TestTaskResult:
    """TaskResult 테스트"""

    def test_str_success(self):
        result = TaskResult(identifier="prod", region="us-east-1", success=True, data=3, duration_ms=100)

        assert str(result) == "[prod/us-east-1] OK (100ms)"

    def test_str_failure(self):
        result = TaskResult(identifier="prod", region="us-east-1", success=False, error=_error())

        assert str(result) == "[prod/us-east-1] FAIL (0ms)"


class TestParallelExecutionResult:
    """ParallelExecutionResult 테스트"""

    @pytest.fixture
    def mixed(self):
        return ParallelExecutionResult(
            results=(
                TaskResult("prod", "us-east-1", True, data=2, duration_ms=10),
                TaskResult("prod", "eu-west-1", True, data=0, duration_ms=20),
                TaskResult("dev", "us-east-1", False, error=_error("dev", "us-east-1", ErrorCategory.TIMEOUT)),
                TaskResult("dev", "eu-west-1", False, error=_error("dev", "eu-west-1", ErrorCategory.TIMEOUT)),
                TaskResult("qa", "us-east-1", False, error=_error("qa", "us-east-1", ErrorCategory.ACCESS_DENIED)),
            )
        )

    def test_empty(self):
        result = ParallelExecutionResult()

        assert result.total_count == 0
        assert not result.has_any_failure()
        assert result.get_error_summary() == "실패한 작업 없음"

    def test_counts(self, mixed):
        assert mixed.total_count == 5
        assert mixed.success_count == 2
        assert mixed.error_count == 3
        assert mixed.has_any_failure()

    def test_get_data_keeps_zero(self, mixed):
        """0은 None이 아니므로 포함"""
        assert mixed.get_data() == [2, 0]

    def test_errors_by_category(self, mixed):
        grouped = mixed.get_errors_by_category()

        assert len(grouped[ErrorCategory.TIMEOUT]) == 2
        assert len(grouped[ErrorCategory.ACCESS_DENIED]) == 1

    def test_error_summary(self, mixed):
        summary = mixed.get_error_summary()

        assert summary.splitlines()[0] == "총 3개 작업 실패"
        assert "  [timeout] 2건: dev/us-east-1, dev/eu-west-1" in summary
        assert "  [access_denied] 1건: qa/us-east-1" in summary
