"""
TTL and checksum based response cache.

Entries are stored as JSON documents in a diskcache store, one key per
cached response. Expiry is lazy: an entry older than the ttl given to `get`
is deleted when it is read, there is no background sweep.

Two failure kinds are kept apart on purpose:

  - CacheMiss: nothing usable is cached (absent, undecodable or expired).
    Callers fetch fresh data and usually `put` it afterwards.
  - StoreError: the store itself failed. This is not a miss and should
    abort the caller.
"""

import base64
import binascii
import hashlib
import json
import logging
import os
import sqlite3
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

import diskcache

from mule.mule_errors import CacheMiss, StoreError

logger = logging.getLogger("mule.cache")

DEFAULT_BUCKET = "data"

_STORE_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)


def checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@dataclass
class Entry:
    when: float
    data: bytes
    checksum: str

    def dumps(self) -> bytes:
        doc = {
            "when": datetime.fromtimestamp(self.when, timezone.utc).isoformat(),
            "data": base64.b64encode(self.data).decode("ascii"),
            "sum": self.checksum,
        }
        return json.dumps(doc).encode("utf-8")

    @classmethod
    def loads(cls, raw: bytes) -> 'Entry':
        """Decodes a stored entry; raises ValueError when it is malformed."""
        try:
            doc = json.loads(raw)
            when = datetime.fromisoformat(doc["when"]).timestamp()
            data = base64.b64decode(doc["data"], validate=True)
            sum_ = doc["sum"]
        except (KeyError, TypeError, binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"malformed cache entry: {e}") from e
        if not isinstance(sum_, str):
            raise ValueError("malformed cache entry: checksum is not a string")
        return cls(when=when, data=data, checksum=sum_)


class ResponseCache:
    """Memoizes response payloads by key, with a per-read time to live."""
    def __init__(self, store: diskcache.Cache, *, clock: Callable[[], float] = time.time):
        self.store = store
        self.clock = clock

    def get(self, key: str, ttl: Union[float, timedelta]) -> bytes:
        if isinstance(ttl, timedelta):
            ttl = ttl.total_seconds()
        # The miss is raised outside the transaction: an exception escaping
        # transact() rolls it back, and the expiry delete must be kept.
        entry: Optional[Entry] = None
        try:
            with self.store.transact():
                raw = self.store.get(key)
                if raw is not None:
                    try:
                        entry = Entry.loads(raw)
                    except ValueError:
                        logger.debug("undecodable cache entry for %s", key)
                if entry is not None and self.clock() - entry.when >= ttl:
                    logger.debug("cache entry for %s expired", key)
                    self.store.delete(key)
                    entry = None
        except _STORE_ERRORS as e:
            raise StoreError(f"{key}: cache read failed: {e}") from e
        if entry is None:
            logger.debug("cache miss for %s", key)
            raise CacheMiss(key)
        logger.debug("cache hit for %s", key)
        return entry.data

    def put(self, key: str, data: bytes):
        data = bytes(data)
        entry = Entry(when=self.clock(), data=data, checksum=checksum(data))
        try:
            with self.store.transact():
                self.store.set(key, entry.dumps())
        except _STORE_ERRORS as e:
            raise StoreError(f"{key}: cache write failed: {e}") from e

    def close(self):
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def open_cache(directory: Optional[str] = None, bucket: str = DEFAULT_BUCKET,
               *, clock: Callable[[], float] = time.time) -> ResponseCache:
    """Opens (creating if needed) the store under directory/bucket."""
    path = os.path.join(directory or ".mule", bucket)
    try:
        store = diskcache.Cache(path)
    except _STORE_ERRORS as e:
        raise StoreError(f"{path}: can not open cache: {e}") from e
    logger.info("cache opened at %s", path)
    return ResponseCache(store, clock=clock)
