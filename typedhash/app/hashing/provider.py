"""
Thread-safe hash provider.

HashProvider holds one HashFactory per registered, non-NIL hash type and
serializes access to each of them with its own lock. Computations of
different types run in parallel; computations of the same type queue up
behind one lock.

This is safe but contended. High-throughput callers should own a
private HashFactory (one per thread) instead of going through the
provider.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache
from typing import Dict, Optional

from typedhash.app.errors import BadFormatError, CodingFault
from typedhash.app.hashing.factory import CompositePart, HashFactory
from typedhash.app.hashing.functions import BytesLike
from typedhash.app.hashing.registry import HashTypeRegistry, get_default_registry
from typedhash.app.hashing.value import Hash

logger = logging.getLogger(__name__)

TYPE1_HASH_TYPE_ID = 1


class HashProvider:
    """
    Process-wide, lock-guarded access to one HashFactory per hash type.
    """

    def __init__(self, registry: Optional[HashTypeRegistry] = None) -> None:
        self._registry = registry if registry is not None else get_default_registry()
        self._factories: Dict[int, HashFactory] = {}
        self._locks: Dict[int, threading.Lock] = {}

        for type_id in self._registry.type_ids:
            try:
                self._factories[type_id] = HashFactory(type_id, self._registry)
            except BadFormatError as exc:
                # Registered types always resolve.
                raise CodingFault(
                    f"Cannot create hash factory for type {type_id}"
                ) from exc
            self._locks[type_id] = threading.Lock()

        logger.debug(
            "hash_provider_ready",
            extra={"type_ids": sorted(self._factories)},
        )

    @property
    def registry(self) -> HashTypeRegistry:
        return self._registry

    def _resolve(self, type_id: Optional[int]) -> int:
        if type_id is None:
            return self._registry.default_type_id
        if type_id not in self._factories:
            raise BadFormatError(f"Invalid hash type ID {type_id}")
        return type_id

    def get_hash_of(self, data: BytesLike, type_id: Optional[int] = None) -> Hash:
        """
        Hash ``data`` with the given type (default type when None).

        Raises BadFormatError for an unknown or NIL type id.
        """
        type_id = self._resolve(type_id)

        with self._locks[type_id]:
            return self._factories[type_id].get_hash_of(data)

    def get_composite_hash_of(
        self,
        *parts: CompositePart,
        type_id: Optional[int] = None,
    ) -> Hash:
        """
        Composite hash of ``parts`` with the given type (default when None).

        Raises BadFormatError for an unknown or NIL type id and
        CodingFault if a part is NIL_HASH.
        """
        type_id = self._resolve(type_id)

        with self._locks[type_id]:
            return self._factories[type_id].get_composite_hash_of(*parts)

    def get_type1_composite_hash_of(self, *parts: CompositePart) -> Hash:
        return self.get_composite_hash_of(*parts, type_id=TYPE1_HASH_TYPE_ID)


@lru_cache(maxsize=1)
def get_hash_provider() -> HashProvider:
    """
    Process-wide provider over the default registry.
    """
    return HashProvider(get_default_registry())
