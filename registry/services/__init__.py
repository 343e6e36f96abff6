"""Service layer for business logic."""

from registry.services.registry_service import RegistryService

__all__ = [
    "RegistryService",
]
