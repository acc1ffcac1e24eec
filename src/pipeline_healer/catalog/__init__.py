"""Catalog module - failure detection rules and remediation recipes."""

from .registry import Catalog, CatalogError, default_catalog

__all__ = ["Catalog", "CatalogError", "default_catalog"]
