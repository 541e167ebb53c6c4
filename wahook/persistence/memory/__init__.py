from .dedup_cache import DedupCache, call_key

__all__ = ["DedupCache", "call_key"]
