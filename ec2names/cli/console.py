"""
ec2names/cli/console.py - Rich 콘솔 유틸리티

CLI 출력용 콘솔과 RichHandler 기반 로깅 설정을 제공합니다.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ec2names.config import LogConfig

# botocore 노이즈 로그 제한
logging.getLogger("botocore.credentials").setLevel(logging.WARNING)
logging.getLogger("botocore.loaders").setLevel(logging.WARNING)
logging.getLogger("botocore.session").setLevel(logging.WARNING)

# 전역 콘솔 인스턴스
console = Console(highlight=False, soft_wrap=True)

# 상태 심볼
SYMBOL_SUCCESS = "✓"
SYMBOL_ERROR = "✗"
SYMBOL_WARNING = "!"


def configure_logging(config: LogConfig | None = None) -> logging.Logger:
    """ec2names 로거에 RichHandler 설정

    이미 핸들러가 있으면 레벨만 갱신합니다.

    Returns:
        "ec2names" 패키지 로거
    """
    config = config or LogConfig.from_env()
    logger = logging.getLogger("ec2names")
    logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    if not logger.handlers:
        handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt=config.date_format))
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def print_success(message: str) -> None:
    console.print(f"[green]{SYMBOL_SUCCESS} {escape(message)}[/green]")


def print_error(message: str) -> None:
    console.print(f"[red]{SYMBOL_ERROR} {escape(message)}[/red]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]{SYMBOL_WARNING} {escape(message)}[/yellow]")
