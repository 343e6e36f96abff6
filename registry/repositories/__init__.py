"""Repository layer for registry storage."""

from registry.repositories.registry_store import JsonSnapshotFile, RegistryStore

__all__ = [
    "JsonSnapshotFile",
    "RegistryStore",
]
