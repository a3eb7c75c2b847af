"""Storefront: catalog browsing, cart and checkout."""

__version__ = "0.1.0"
