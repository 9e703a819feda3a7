#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import asyncio
import logging
import time
import uuid
from collections import namedtuple

store_logger = logging.getLogger("store")

DEFAULT_RESOURCE_TTL = 600  # 10 minutes

ResourceEntry = namedtuple("ResourceEntry", ["resource_id", "remote_url", "inserted_at"])


def new_resource_id():
    # uuid4 draws its 122 random bits from os.urandom
    return str(uuid.uuid4())


class ResourceStore:
    """
    In-memory mapping of opaque resource identifiers to remote URLs.

    Entries expire a fixed TTL after insertion, whether or not they were
    ever read. Reads never refresh the TTL. Expired entries are dropped lazily
    on read and in bulk by evict_expired_items().
    """

    def __init__(self, ttl=DEFAULT_RESOURCE_TTL, clock=time.time):
        self.entries = {}
        self._lock = asyncio.Lock()
        self.ttl = ttl
        self._clock = clock

    def __len__(self):
        return len(self.entries)

    def _is_expired(self, entry, current_time):
        return current_time > entry.inserted_at + self.ttl

    def _cleanup_expired_items(self):
        current_time = self._clock()
        expired_keys = [
            k for k, entry in self.entries.items() if self._is_expired(entry, current_time)
        ]
        for k in expired_keys:
            self.entries.pop(k, None)
        return len(expired_keys)

    async def put(self, resource_id, remote_url):
        async with self._lock:
            self.entries[resource_id] = ResourceEntry(resource_id, remote_url, self._clock())

    async def get(self, resource_id):
        async with self._lock:
            entry = self.entries.get(resource_id)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()):
                self.entries.pop(resource_id, None)
                return None
            return entry.remote_url

    async def exists(self, resource_id):
        return await self.get(resource_id) is not None

    async def evict_expired_items(self):
        async with self._lock:
            return self._cleanup_expired_items()


async def periodic_store_cleanup(store, interval=60):
    while True:
        try:
            evicted_count = await store.evict_expired_items()
            if evicted_count > 0:
                store_logger.info("Resource store cleanup: evicted %s expired entries", evicted_count)
            store_logger.debug("Resource store holds %s entries", len(store))
        except Exception as e:
            store_logger.error("Error during resource store cleanup: %s", e)
        await asyncio.sleep(interval)
