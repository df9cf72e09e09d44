"""Repository implementations for the infrastructure layer."""

from .account_store import SQLAccountStore
from .in_memory_account_store import InMemoryAccountStore
from src.domain.interfaces.repositories import IAccountStore

__all__ = ["SQLAccountStore", "InMemoryAccountStore", "IAccountStore"]
