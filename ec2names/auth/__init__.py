"""
ec2names/auth - 계정 자격 증명 처리

계정 설정(정적 키, 복호화 설정)으로부터 boto3 Session을 생성합니다.
"""

from .credentials import CredentialsProvider, Decryptor

__all__ = ["CredentialsProvider", "Decryptor"]
