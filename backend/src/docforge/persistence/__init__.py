"""Persistence layer - document stores and database engines."""

from docforge.persistence.config import DatabaseConfig, dispose_engines, get_engine
from docforge.persistence.store import DocumentStore, MemoryDocumentStore
from docforge.persistence.sql_store import SqlDocumentStore

__all__ = [
    "DatabaseConfig",
    "DocumentStore",
    "MemoryDocumentStore",
    "SqlDocumentStore",
    "dispose_engines",
    "get_engine",
]
