from .kv_entry import KvEntry

__all__ = ["KvEntry"]
