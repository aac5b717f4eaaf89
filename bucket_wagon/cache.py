"""Bucket identity cache shared between adapter instances."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Dict, Optional

from .models import BucketIdentity

logger = logging.getLogger(__name__)


class BucketIdentityCache:
    """Maps bucket names to the identity resolved on first use.

    Safe to share between adapters running in parallel build threads. Loads
    are idempotent, so two threads racing on the same bucket may both probe
    it; the first stored identity wins.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._entries: Dict[str, BucketIdentity] = {}

    def get(self, bucket: str) -> Optional[BucketIdentity]:
        with self._lock:
            return self._entries.get(bucket)

    def put(self, identity: BucketIdentity) -> BucketIdentity:
        with self._lock:
            return self._entries.setdefault(identity.name, identity)

    def get_or_load(self, bucket: str, loader: Callable[[str], BucketIdentity]) -> BucketIdentity:
        cached = self.get(bucket)
        if cached is not None:
            return cached
        identity = loader(bucket)
        logger.debug("Cached identity for bucket %s (region=%s)", bucket, identity.region)
        return self.put(identity)

    def invalidate(self, bucket: str) -> None:
        with self._lock:
            self._entries.pop(bucket, None)

    def __contains__(self, bucket: object) -> bool:
        with self._lock:
            return bucket in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
