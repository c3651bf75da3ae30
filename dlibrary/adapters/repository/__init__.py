"""Repository adapters - Database implementations."""

from .memory import InMemoryAccountRepository
from .postgres import PostgresAccountRepository, run_migrations, wait_for_database

__all__ = [
    "InMemoryAccountRepository",
    "PostgresAccountRepository",
    "run_migrations",
    "wait_for_database",
]
