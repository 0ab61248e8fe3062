"""
ec2names/parallel/client.py - boto3 client 생성 헬퍼

Retry + 타임아웃 + 연결 풀 + 프록시가 설정된 boto3 client를 생성합니다.
연결/읽기 타임아웃은 miss-fill 시 resolve() 호출자가 블로킹되는 최대 시간을 제한합니다.

Example:
    from ec2names.parallel.client import get_client

    ec2 = get_client(session, "ec2", region_name="ap-northeast-2", max_attempts=3)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, cast

from ec2names.config import settings

if TYPE_CHECKING:
    import boto3

RetryMode = Literal["legacy", "standard", "adaptive"]

DEFAULT_RETRY_MODE: RetryMode = "standard"
DEFAULT_MAX_POOL_CONNECTIONS = 10


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    max_attempts: int = settings.DEFAULT_MAX_RETRY_SIZE,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    connect_timeout: int = settings.API_CONNECT_TIMEOUT,
    read_timeout: int = settings.API_READ_TIMEOUT,
    max_pool_connections: int = DEFAULT_MAX_POOL_CONNECTIONS,
    proxies: dict[str, str] | None = None,
    endpoint_url: str | None = None,
    **kwargs: Any,
) -> Any:
    """Retry가 적용된 boto3 client 생성

    Args:
        session: boto3 Session
        service_name: AWS 서비스 이름 (ec2 등)
        region_name: 리전 (None이면 세션 기본값)
        max_attempts: 최대 시도 횟수 (설정의 max_retry_size)
        retry_mode: 재시도 모드
        connect_timeout: 연결 타임아웃 (초)
        read_timeout: 읽기 타임아웃 (초)
        max_pool_connections: HTTP 연결 풀 크기
        proxies: {"http": url, "https": url} (None이면 프록시 없음)
        endpoint_url: 엔드포인트 URL (None이면 botocore 기본 해석)
        **kwargs: session.client()에 전달할 추가 인자

    Returns:
        boto3 client
    """
    from botocore.config import Config

    config = Config(
        retries={"max_attempts": max(1, max_attempts), "mode": retry_mode},  # pyright: ignore[reportArgumentType]
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        max_pool_connections=max_pool_connections,
        proxies=proxies,
    )

    if "config" in kwargs:
        existing = kwargs.pop("config")
        config = config.merge(existing)

    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url

    # boto3-stubs는 Literal 서비스명을 요구하므로 Any로 캐스팅
    return session.client(  # pyright: ignore[reportCallIssue]
        cast(Any, service_name),
        region_name=region_name,
        config=config,
        **kwargs,
    )
