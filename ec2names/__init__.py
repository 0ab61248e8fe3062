"""
ec2names - EC2 인스턴스 이름 캐시

계정/리전/인스턴스 ID로 사람이 읽을 수 있는 인스턴스 이름을 반환합니다.
주기적 일괄 갱신과 캐시 미스 시 동기 조회로 채워지는 메모리 캐시입니다.

사용 예시:
    from ec2names import InstanceNameProvider, Account, NameResolutionConfig

    provider = InstanceNameProvider()
    provider.initialise(
        accounts=[Account("prod", regions=("ap-northeast-2",))],
        name_config=NameResolutionConfig(enabled=True),
    )
    provider.resolve("prod", "ap-northeast-2", "i-0123456789abcdef0")

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__version__ = "1.0.0"

__all__ = [
    "InstanceNameProvider",
    "Account",
    "ConfigSnapshot",
    "CredentialsDecryptionConfig",
    "NameResolutionConfig",
    "ProxyConfig",
    "load_config",
]

_IMPORT_MAPPING = {
    "InstanceNameProvider": (".names.provider", "InstanceNameProvider"),
    "Account": (".config", "Account"),
    "ConfigSnapshot": (".config", "ConfigSnapshot"),
    "CredentialsDecryptionConfig": (".config", "CredentialsDecryptionConfig"),
    "NameResolutionConfig": (".config", "NameResolutionConfig"),
    "ProxyConfig": (".config", "ProxyConfig"),
    "load_config": (".config", "load_config"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
