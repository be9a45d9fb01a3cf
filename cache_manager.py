#!/usr/bin/env python3
"""
Cache Manager for the Resume Modifier

Provides caching for:
1. LLM replies, keyed by provider, model and full prompt
2. Compiled PDFs, keyed by the LaTeX source

Uses file-based caching with TTL (Time To Live) for automatic cleanup.
"""

import gzip
import hashlib
import json
import pickle
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

import config

CACHE_TYPES = ('llm', 'pdfs')


class CacheManager:
    """File-based TTL cache shared by the LLM client and the PDF compiler"""

    def __init__(self, cache_dir: Union[str, Path] = "cache", ttl_hours: int = 24):
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_hours * 3600
        self.hits = 0
        self.misses = 0

        for cache_type in CACHE_TYPES:
            (self.cache_dir / cache_type).mkdir(parents=True, exist_ok=True)

    def _get_cache_key(self, data: Union[str, Dict, Any]) -> str:
        """Generate a deterministic cache key from data"""
        if isinstance(data, str):
            content = data
        elif isinstance(data, dict):
            content = json.dumps(data, sort_keys=True)
        else:
            content = str(data)

        return hashlib.sha256(content.encode('utf-8')).hexdigest()

    def _get_cache_path(self, cache_type: str, key: str) -> Path:
        return self.cache_dir / cache_type / f"{key}.gz"

    def _is_expired(self, cache_path: Path) -> bool:
        if not cache_path.exists():
            return True

        file_age = time.time() - cache_path.stat().st_mtime
        return file_age > self.ttl_seconds

    def get(self, cache_type: str, key_data: Union[str, Dict, Any]) -> Optional[Any]:
        """Retrieve data from cache if it exists and is not expired"""
        cache_path = self._get_cache_path(cache_type, self._get_cache_key(key_data))

        if self._is_expired(cache_path):
            cache_path.unlink(missing_ok=True)
            self.misses += 1
            return None

        try:
            with gzip.open(cache_path, 'rb') as f:
                value = pickle.load(f)
        except (OSError, EOFError, pickle.UnpicklingError) as e:
            print(f"Cache read error: {e}")
            cache_path.unlink(missing_ok=True)
            self.misses += 1
            return None

        self.hits += 1
        return value

    def set(self, cache_type: str, key_data: Union[str, Dict, Any], value: Any) -> bool:
        """Store data in cache"""
        try:
            cache_path = self._get_cache_path(cache_type, self._get_cache_key(key_data))
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            with gzip.open(cache_path, 'wb') as f:
                pickle.dump(value, f)
            return True
        except (OSError, pickle.PicklingError) as e:
            print(f"Cache write error: {e}")
            return False

    def _cache_files(self):
        for cache_type_dir in self.cache_dir.iterdir():
            if cache_type_dir.is_dir():
                for cache_file in cache_type_dir.iterdir():
                    if cache_file.is_file():
                        yield cache_file

    def clear_expired(self) -> int:
        """Clear all expired cache entries and return count of removed files"""
        removed_count = 0
        for cache_file in list(self._cache_files()):
            if self._is_expired(cache_file):
                cache_file.unlink(missing_ok=True)
                removed_count += 1
        return removed_count

    def clear_all(self) -> int:
        """Clear all cache entries and return count of removed files"""
        removed_count = 0
        for cache_file in list(self._cache_files()):
            cache_file.unlink(missing_ok=True)
            removed_count += 1
        return removed_count

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        lookups = self.hits + self.misses
        stats = {
            'total_files': 0,
            'total_size_bytes': 0,
            'expired_files': 0,
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hits / lookups if lookups else 0.0,
            'by_type': {}
        }

        for cache_type_dir in self.cache_dir.iterdir():
            if not cache_type_dir.is_dir():
                continue
            type_stats = {'files': 0, 'size_bytes': 0, 'expired': 0}

            for cache_file in cache_type_dir.iterdir():
                if cache_file.is_file():
                    type_stats['files'] += 1
                    type_stats['size_bytes'] += cache_file.stat().st_size
                    if self._is_expired(cache_file):
                        type_stats['expired'] += 1

            stats['by_type'][cache_type_dir.name] = type_stats
            stats['total_files'] += type_stats['files']
            stats['total_size_bytes'] += type_stats['size_bytes']
            stats['expired_files'] += type_stats['expired']

        return stats


# Global cache instance
_cache_manager = None


def get_cache_manager() -> CacheManager:
    """Get the global cache manager instance"""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = CacheManager(config.CACHE_DIR, config.CACHE_TTL_HOURS)
    return _cache_manager


def reset_cache_manager(cache_manager: Optional[CacheManager] = None):
    """Replace the global cache instance (None recreates it lazily from config)"""
    global _cache_manager
    _cache_manager = cache_manager


def cache_llm_response(prompt: str, response: str) -> bool:
    """Cache an LLM response"""
    if not config.CACHE_ENABLED:
        return False
    return get_cache_manager().set("llm", prompt, response)


def get_cached_llm_response(prompt: str) -> Optional[str]:
    """Get cached LLM response if available"""
    if not config.CACHE_ENABLED:
        return None
    return get_cache_manager().get("llm", prompt)


def cache_pdf_compilation(tex_content: str, pdf_bytes: bytes) -> bool:
    """Cache the PDF produced from a LaTeX source"""
    if not config.CACHE_ENABLED:
        return False
    return get_cache_manager().set("pdfs", tex_content, pdf_bytes)


def get_cached_pdf_compilation(tex_content: str) -> Optional[bytes]:
    """Get cached PDF bytes for a LaTeX source if available"""
    if not config.CACHE_ENABLED:
        return None
    return get_cache_manager().get("pdfs", tex_content)


def cleanup_cache() -> int:
    """Clean up expired cache entries"""
    if not config.CACHE_ENABLED:
        return 0
    return get_cache_manager().clear_expired()


def get_cache_stats() -> Dict[str, Any]:
    """Get cache statistics"""
    if not config.CACHE_ENABLED:
        return {'enabled': False}
    return get_cache_manager().get_stats()
