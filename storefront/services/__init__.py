"""Adapters for the storefront's external collaborators."""

from .cart_storage import JsonFileCartStorage, SessionCartStorage
from .cosmic_client import CosmicCatalogProvider
from .local_catalog import LocalCatalogProvider

__all__ = [
    "CosmicCatalogProvider",
    "JsonFileCartStorage",
    "LocalCatalogProvider",
    "SessionCartStorage",
]
