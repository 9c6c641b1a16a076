"""In-memory data stores for contracts and their references."""

from installments.store.memory import InstallmentDataStore

__all__ = ["InstallmentDataStore"]
