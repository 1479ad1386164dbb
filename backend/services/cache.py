"""
Forkboard Caching Service

File-backed cache for slow-changing GitHub lookups: the login behind the
configured token and that user's repository listing. Each entry records its
own TTL. Fork graph memo state is request-scoped and never stored here.
"""

import hashlib
import json
import os
import time
from typing import Any

CACHE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), ".cache")
DEFAULT_TTL = 300  # 5 minutes
LOCAL_DEV_TTL = 3600  # 1 hour

VIEWER_LOGIN_KEY = "viewer-login"
USER_REPOS_KEY = "github-repos"


def _is_cache_enabled() -> bool:
    """Caching is on unless CACHE_DISABLED=1 (evaluated at runtime)."""
    return os.environ.get("CACHE_DISABLED") != "1"


def default_ttl() -> int:
    if os.environ.get("LOCAL_CACHE") == "1" or os.environ.get("FLASK_ENV") == "development":
        return LOCAL_DEV_TTL
    return DEFAULT_TTL


def token_scoped_key(prefix: str, token: str) -> str:
    """Cache key that differs per GitHub token without writing the token to disk."""
    digest = hashlib.sha256(token.encode()).hexdigest()[:16]
    return f"{prefix}:{digest}"


def _entry_path(cache_key: str) -> str:
    return os.path.join(CACHE_DIR, hashlib.md5(cache_key.encode()).hexdigest() + ".json")


def _read_entry(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            entry = json.load(f)
    except (json.JSONDecodeError, OSError):
        return None
    return entry if isinstance(entry, dict) else None


def _is_fresh(entry) -> bool:
    ttl = entry.get("ttl", DEFAULT_TTL)
    return time.time() - entry.get("timestamp", 0) < ttl


def get_cached(cache_key: str) -> Any | None:
    """Return the cached value for a key, or None when missing, expired or disabled."""
    if not _is_cache_enabled():
        return None

    entry = _read_entry(_entry_path(cache_key))
    if entry is None:
        return None
    if not _is_fresh(entry):
        print(f"[CACHE] EXPIRED: {cache_key}")
        return None

    print(f"[CACHE] HIT: {cache_key}")
    return entry.get("data")


def set_cached(cache_key: str, data: Any, ttl: int | None = None) -> None:
    """Store a JSON-serializable value. Write failures are logged, not raised."""
    if not _is_cache_enabled():
        return

    effective_ttl = ttl if ttl is not None else default_ttl()
    os.makedirs(CACHE_DIR, exist_ok=True)
    try:
        with open(_entry_path(cache_key), "w", encoding="utf-8") as f:
            json.dump({
                "timestamp": time.time(),
                "ttl": effective_ttl,
                "key": cache_key,
                "data": data,
            }, f, indent=2)
        print(f"[CACHE] SET: {cache_key} (TTL: {effective_ttl}s)")
    except (OSError, TypeError) as e:
        print(f"[CACHE] ERROR setting {cache_key}: {e}")


def clear_cache(cache_key: str | None = None) -> int:
    """Clear one key, or every entry when no key is given. Returns the number removed."""
    if not os.path.isdir(CACHE_DIR):
        return 0

    if cache_key:
        path = _entry_path(cache_key)
        if not os.path.exists(path):
            return 0
        os.remove(path)
        print(f"[CACHE] CLEARED: {cache_key}")
        return 1

    cleared = 0
    for filename in os.listdir(CACHE_DIR):
        if filename.endswith(".json"):
            os.remove(os.path.join(CACHE_DIR, filename))
            cleared += 1
    print(f"[CACHE] CLEARED ALL: {cleared} entries")
    return cleared


def get_cache_stats() -> dict:
    """Summarize the cache directory for the monitoring endpoint."""
    stats = {
        "enabled": _is_cache_enabled(),
        "default_ttl_seconds": default_ttl(),
        "cache_dir": CACHE_DIR,
        "entries": 0,
        "total_size_bytes": 0,
        "valid_entries": 0,
        "expired_entries": 0,
    }
    if not os.path.isdir(CACHE_DIR):
        return stats

    for filename in os.listdir(CACHE_DIR):
        if not filename.endswith(".json"):
            continue
        path = os.path.join(CACHE_DIR, filename)
        stats["entries"] += 1
        stats["total_size_bytes"] += os.path.getsize(path)
        entry = _read_entry(path)
        if entry is not None and _is_fresh(entry):
            stats["valid_entries"] += 1
        else:
            stats["expired_entries"] += 1

    return stats
