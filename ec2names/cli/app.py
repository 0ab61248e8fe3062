"""
ec2names/cli/app.py - CLI 엔트리포인트

Click 기반의 CLI입니다. YAML 설정 파일로 InstanceNameProvider를 구성해
단건 조회 또는 1회 갱신 패스를 실행합니다.

명령어 구조:
    ec2names --version
    ec2names resolve -c config.yml ACCOUNT REGION INSTANCE_ID
    ec2names refresh -c config.yml

설정 파일 예시:
    accounts:
      - display_name: prod
        regions: [ap-northeast-2, us-east-1]
        access_key: AKIA...
        secret_key: ...
    instance_name:
      enabled: true
      tag_key: Name
      tag_filter_name: tag-key
    max_retry_size: 3
"""

from __future__ import annotations

from dataclasses import replace

import click
from rich.table import Table

from ec2names import __version__
from ec2names.config import ConfigSnapshot, LogConfig, load_config
from ec2names.exceptions import ConfigError
from ec2names.names import InstanceNameProvider

from .console import configure_logging, console, print_error, print_success, print_warning


def _load(config_path: str) -> ConfigSnapshot:
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise click.exceptions.Exit(2) from e


@click.group()
@click.version_option(__version__, prog_name="ec2names")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="로그 레벨 (기본: LOG_LEVEL 환경변수 또는 INFO)",
)
def cli(log_level: str | None) -> None:
    """EC2 인스턴스 이름 캐시"""
    config = LogConfig.from_env()
    if log_level:
        config.level = log_level.upper()
    configure_logging(config)


@cli.command()
@click.option("-c", "--config", "config_path", required=True, type=click.Path(dir_okay=False), help="설정 파일 경로")
@click.argument("account")
@click.argument("region")
@click.argument("instance_id")
def resolve(config_path: str, account: str, region: str, instance_id: str) -> None:
    """인스턴스 ID 하나의 이름 조회"""
    snapshot = _load(config_path)

    with InstanceNameProvider() as provider:
        provider.apply(snapshot)
        name = provider.resolve(account, region, instance_id)
        if provider.errors:
            print_warning(provider.error_summary)

    click.echo(name)


@cli.command()
@click.option("-c", "--config", "config_path", required=True, type=click.Path(dir_okay=False), help="설정 파일 경로")
def refresh(config_path: str) -> None:
    """전체 계정 x 리전 갱신 1회 실행 후 결과 출력"""
    snapshot = _load(config_path)
    # 스케줄러 없이 1회만 실행하도록 초기화 경로는 타지 않음
    snapshot = replace(snapshot, names=replace(snapshot.names, enabled=False))

    with InstanceNameProvider() as provider:
        provider.apply(snapshot)
        result = provider.refresh_all()

        table = Table(title="인스턴스 이름 사전")
        table.add_column("계정")
        table.add_column("항목 수", justify="right")
        for account_name in provider.registry.names():
            table.add_row(account_name, str(len(provider.registry.get(account_name))))
        console.print(table)

    if result.has_any_failure():
        print_warning(result.get_error_summary())
    else:
        print_success(f"갱신 완료: 작업 {result.success_count}/{result.total_count}, 이름 {sum(result.get_data())}개")
