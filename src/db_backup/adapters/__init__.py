"""Catalog client package.

Provides the ``CatalogClient`` Protocol, the async PostgreSQL
implementation used to gather incremental metadata, and the
``CatalogIntrospector`` that lists the tables in a backup set.

Usage:
    from db_backup.adapters import CatalogClient, AsyncPostgresAdapter, CatalogIntrospector
"""

from db_backup.adapters.base import CatalogClient
from db_backup.adapters.introspector import CatalogIntrospector
from db_backup.adapters.postgres import AsyncPostgresAdapter

__all__ = [
    "CatalogClient",
    "AsyncPostgresAdapter",
    "CatalogIntrospector",
]
