"""
ec2names/auth/credentials.py - 계정별 boto3 Session 생성

계정 설정과 복호화 설정으로부터 사용할 수 있는 boto3 Session을 만듭니다.

자격 증명 결정 순서:
    1. 액세스/시크릿 키가 있고 복호화 비활성 → 그대로 사용
    2. 복호화 활성 → Decryptor로 두 키를 복호화 후 사용
    3. 키 없음 → boto3 기본 자격 증명 체인 (환경변수, 인스턴스 프로파일 등)

Decryptor는 (암호문, 암호화 키) -> 평문 형태의 callable이며, 구현은 외부에서 주입합니다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import boto3

from ec2names.config import Account, CredentialsDecryptionConfig, is_blank
from ec2names.exceptions import ConfigError

logger = logging.getLogger(__name__)

Decryptor = Callable[[str, str], str]


class CredentialsProvider:
    """계정 설정 → boto3 Session 변환기

    Example:
        provider = CredentialsProvider(decryptor=my_decrypt)
        session = provider.get_session(account, snapshot.decryption)
    """

    def __init__(self, decryptor: Decryptor | None = None):
        self._decryptor = decryptor

    def get_session(
        self,
        account: Account,
        decryption: CredentialsDecryptionConfig,
        region: str | None = None,
    ) -> boto3.Session:
        """계정에 대한 boto3 Session 생성

        Raises:
            ConfigError: 복호화가 활성인데 암호화 키나 Decryptor가 없는 경우
        """
        if not account.has_static_credentials:
            logger.debug("[%s] 정적 자격 증명 없음, 기본 자격 증명 체인 사용", account.display_name)
            return boto3.Session(region_name=region)

        access_key = account.access_key or ""
        secret_key = account.secret_key or ""

        if decryption.enabled:
            access_key, secret_key = self._decrypt(account, decryption, access_key, secret_key)

        return boto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )

    def _decrypt(
        self,
        account: Account,
        decryption: CredentialsDecryptionConfig,
        access_key: str,
        secret_key: str,
    ) -> tuple[str, str]:
        if is_blank(decryption.encryption_key):
            raise ConfigError("credentials_decryption.encryption_key", "복호화가 활성화되었지만 암호화 키가 없습니다")
        if self._decryptor is None:
            raise ConfigError("credentials_decryption", "복호화가 활성화되었지만 Decryptor가 설정되지 않았습니다")

        key = decryption.encryption_key or ""
        try:
            return self._decryptor(access_key, key), self._decryptor(secret_key, key)
        except Exception as e:
            raise ConfigError(
                f"accounts[{account.display_name}]",
                "자격 증명 복호화 실패",
                cause=e,
            ) from e
