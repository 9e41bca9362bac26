from .store import JsonFileStore, MemoryStore, StateStore

__all__ = ["JsonFileStore", "MemoryStore", "StateStore"]
