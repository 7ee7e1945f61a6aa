"""Read-through cache with explicit expiry.

Views never touch module-level cache state directly: they receive a
``ReadThroughCache`` (the default one wraps Django's cache, i.e. Redis in
production).  Entries carry their own expiry computed from an injectable
``clock`` so expiry is deterministic under a fake clock in tests.
"""
import hashlib
import json
import logging
import time

from django.core.cache import caches

logger = logging.getLogger("uniqverse")

_MISSING = object()


def make_cache_key(namespace, params):
    """Build ``namespace:<sha256>`` from the canonical JSON of *params*."""
    canonical = json.dumps(params or {}, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


class ReadThroughCache:
    """get/set/TTL cache that computes and stores values on a miss."""

    def __init__(self, backend=None, ttl=120, clock=time.time, prefix=""):
        self.backend = backend if backend is not None else caches["default"]
        self.ttl = ttl
        self.clock = clock
        self.prefix = prefix

    def _key(self, key):
        return f"{self.prefix}{key}"

    def get(self, key, default=None):
        entry = self.backend.get(self._key(key), _MISSING)
        if entry is _MISSING:
            return default
        expires_at, value = entry
        if self.clock() >= expires_at:
            self.backend.delete(self._key(key))
            return default
        return value

    def set(self, key, value, ttl=None):
        ttl = self.ttl if ttl is None else ttl
        self.backend.set(self._key(key), (self.clock() + ttl, value), timeout=ttl)

    def delete(self, key):
        self.backend.delete(self._key(key))

    def get_or_compute(self, key, compute, ttl=None):
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug("Cache hit for %s", key)
            return value
        value = compute()
        self.set(key, value, ttl=ttl)
        return value
