"""
ec2names/cli - 명령줄 인터페이스
"""

from .app import cli

__all__ = ["cli"]
