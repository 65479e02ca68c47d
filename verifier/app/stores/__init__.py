from .base import PayloadStore
from .kubernetes import KubernetesSecretStore
from .memory import InMemoryPayloadStore
from .settings import StoreSettings, get_store_settings

__all__ = [
    "PayloadStore",
    "InMemoryPayloadStore",
    "KubernetesSecretStore",
    "StoreSettings",
    "get_store_settings",
]
