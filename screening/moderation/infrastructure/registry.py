import importlib
from typing import Callable

from screening.moderation.domain.strategies import ProviderAdapter

_ADAPTERS: dict[str, type[ProviderAdapter]] = {}

PROVIDERS_PACKAGE = "screening.moderation.infrastructure.providers"


def register_adapter(name: str) -> Callable[[type[ProviderAdapter]], type[ProviderAdapter]]:
    """Registra uma implementação de ProviderAdapter sob o nome usado na configuração."""

    def decorator(adapter_class: type[ProviderAdapter]) -> type[ProviderAdapter]:
        adapter_class.name = name
        _ADAPTERS[name] = adapter_class
        return adapter_class

    return decorator


def _load_providers() -> None:
    importlib.import_module(PROVIDERS_PACKAGE)


def available_providers() -> list[str]:
    _load_providers()
    return sorted(_ADAPTERS)


def get_adapter_class(name: str) -> type[ProviderAdapter] | None:
    _load_providers()
    return _ADAPTERS.get(name)


def build_adapters(http_client=None) -> dict[str, ProviderAdapter]:
    """Instancia um adapter por provedor registrado (mapa nome -> estratégia)."""
    _load_providers()
    return {name: adapter_class(http_client=http_client) for name, adapter_class in _ADAPTERS.items()}
