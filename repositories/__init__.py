"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for a specific domain entity.
Repositories receive raw data from the database and return domain model objects.
Stores bundle the repositories behind the `Store` protocol the services use.
"""

from config import STORE_BACKEND

_store = None


def get_store():
    """
    Return the process-wide Store selected by STORE_BACKEND.

    'memory' gives an InMemoryStore (lost on restart); anything else
    gives the PostgresStore.
    """
    global _store
    if _store is None:
        if STORE_BACKEND == "memory":
            from repositories.memory_store import InMemoryStore
            _store = InMemoryStore()
        else:
            from repositories.postgres_store import PostgresStore
            _store = PostgresStore()
    return _store
