"""
ec2names/exceptions.py - 통합 예외 계층 구조

이름 캐시 전체에서 사용되는 예외 클래스들을 정의합니다.

예외 계층 구조:
    NameCacheError (베이스)
    ├── ConfigError (설정 관련)
    ├── ValidationError (입력 검증)
    │   └── AccountValidationError (계정 설정 검증)
    └── AccountNotFoundError (설정에 없는 계정)

Usage:
    from ec2names.exceptions import ConfigError

    try:
        snapshot = load_config(path)
    except ConfigError as e:
        print(e.config_key, e)

Note:
    resolve() 경로에서는 어떤 예외도 호출자에게 전파되지 않습니다.
    여기 정의된 예외는 설정 로드와 내부 작업 결과 분류에 사용됩니다.
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class NameCacheError(Exception):
    """ec2names 기본 예외 클래스

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(NameCacheError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class ValidationError(NameCacheError):
    """입력 검증 오류"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Optional[Exception] = None,
    ):
        message = f"검증 오류 [{field}]: 예상값 '{expected}', 실제값 '{value}'"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update(
            {
                "field": field,
                "value": str(value),
                "expected": expected,
            }
        )


class AccountValidationError(ValidationError):
    """계정 설정이 올바르지 않은 경우

    리전 목록 누락, 표시 이름 누락, 자격 증명 일부 누락 등.
    갱신 패스에서는 해당 계정만 건너뜁니다.
    """

    def __init__(
        self,
        account_name: str,
        field: str,
        value: Any,
        expected: str,
    ):
        super().__init__(field, value, expected)
        self.account_name = account_name
        self.message = f"계정 [{account_name}] {self.message}"
        self.details["account_name"] = account_name


class AccountNotFoundError(NameCacheError):
    """설정된 계정 목록에서 계정을 찾을 수 없을 때 발생하는 에러

    Attributes:
        account_name: 찾을 수 없는 계정 표시 이름
    """

    def __init__(self, account_name: str, cause: Optional[Exception] = None):
        super().__init__(f"계정을 찾을 수 없습니다: {account_name}", cause)
        self.account_name = account_name
        self.details["account_name"] = account_name


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

ACCESS_DENIED_CODES = {
    "AccessDenied",
    "AccessDeniedException",
    "UnauthorizedAccess",
    "UnauthorizedOperation",
    "AuthFailure",
}

THROTTLING_CODES = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "RateExceeded",
}

NOT_FOUND_CODES = {
    "ResourceNotFoundException",
    "NotFoundException",
    "InvalidInstanceID.NotFound",
    "InvalidInstanceID.Malformed",
}


def _error_code_of(error: Exception) -> str:
    if hasattr(error, "response"):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인"""
    return _error_code_of(error) in ACCESS_DENIED_CODES


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인"""
    return _error_code_of(error) in THROTTLING_CODES


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    존재하지 않는 인스턴스 ID로 miss-fill을 시도하면
    EC2가 InvalidInstanceID.NotFound를 반환합니다.
    """
    return _error_code_of(error) in NOT_FOUND_CODES
