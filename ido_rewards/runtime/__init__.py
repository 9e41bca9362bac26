from .hooks import PoolRuntimeAdapter

__all__ = ["PoolRuntimeAdapter"]
