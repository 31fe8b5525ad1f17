"""
Hash type registry.

The registry is an ordered, append-only table indexed by type id.
Index 0 is reserved for the NIL type. Entries are never removed or
reordered: a type id and its byte layout are a permanent contract with
every identifier already stored.

Registries are ordinary objects. The process-wide standard registry is
available from get_default_registry(); tests and embedders may build
isolated registries and pass them explicitly.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, Iterator, Sequence, Tuple

from typedhash.app.config import get_settings
from typedhash.app.errors import BadFormatError, CodingFault
from typedhash.app.hashing.functions import Type2HashFunction
from typedhash.app.hashing.types import HashAlgorithm, HashType, type_id_to_bytes

logger = logging.getLogger(__name__)

NIL_HASH_TYPE_ID = 0
DEFAULT_HASH_TYPE_ID = 1

NIL_HASH_TYPE = HashType(
    type_id=NIL_HASH_TYPE_ID,
    algorithm=HashAlgorithm.NIL,
    digest_length=0,
    type_id_bytes=b"",
)


class HashTypeRegistry:
    """
    Positionally indexed table of HashType descriptors.
    """

    def __init__(
        self,
        types: Iterable[HashType],
        default_type_id: int = DEFAULT_HASH_TYPE_ID,
    ) -> None:
        self._types: Tuple[HashType, ...] = tuple(types)

        if not self._types or not self._types[0].is_nil:
            raise CodingFault("Hash type 0 must be the NIL type")

        for position, hash_type in enumerate(self._types):
            if hash_type.type_id != position:
                raise CodingFault(
                    f"Hash type {hash_type.type_id} registered at position "
                    f"{position}"
                )
            if position > 0 and hash_type.is_nil:
                raise CodingFault(f"Hash type {position} may not be NIL")

        if not 0 < default_type_id < len(self._types):
            raise CodingFault(
                f"Default hash type {default_type_id} is not registered"
            )

        self._default_type_id = default_type_id

        logger.debug(
            "hash_type_registry_built",
            extra={
                "type_ids": list(self.type_ids),
                "default_type_id": default_type_id,
            },
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, type_id: int) -> HashType:
        """
        Return the descriptor for ``type_id``.

        Raises BadFormatError if the id is not registered.
        """
        if not isinstance(type_id, int) or not 0 <= type_id < len(self._types):
            raise BadFormatError(f"Invalid hash type ID {type_id}")
        return self._types[type_id]

    @property
    def nil_type(self) -> HashType:
        return self._types[NIL_HASH_TYPE_ID]

    @property
    def default_type_id(self) -> int:
        return self._default_type_id

    @property
    def default_type(self) -> HashType:
        return self._types[self._default_type_id]

    @property
    def type_ids(self) -> Sequence[int]:
        """Registered non-NIL type ids, in order."""
        return range(1, len(self._types))

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[HashType]:
        return iter(self._types)

    def __contains__(self, type_id: object) -> bool:
        return isinstance(type_id, int) and 0 <= type_id < len(self._types)

    # ------------------------------------------------------------------
    # Extension
    # ------------------------------------------------------------------

    def with_type(self, hash_type: HashType) -> "HashTypeRegistry":
        """
        Return a new registry with ``hash_type`` appended.

        The new entry must take the next free type id.
        """
        return HashTypeRegistry(
            (*self._types, hash_type),
            default_type_id=self._default_type_id,
        )


# ----------------------------------------------------------------------
# Standard registry
# ----------------------------------------------------------------------

def standard_hash_types() -> Tuple[HashType, ...]:
    """
    The registered hash types.

    Append new hash types at the end. DO NOT REMOVE OR CHANGE THE ORDER
    OF EXISTING TYPES.
    """
    return (
        NIL_HASH_TYPE,
        HashType(
            type_id=1,
            algorithm=HashAlgorithm.DIGEST,
            digest_name="sha256",
            digest_length=32,
            type_id_bytes=type_id_to_bytes(1),
        ),
        HashType(
            type_id=2,
            algorithm=HashAlgorithm.TYPE2,
            digest_length=Type2HashFunction.LENGTH,
            type_id_bytes=type_id_to_bytes(2),
        ),
    )


def build_standard_registry(
    default_type_id: int = DEFAULT_HASH_TYPE_ID,
) -> HashTypeRegistry:
    return HashTypeRegistry(standard_hash_types(), default_type_id=default_type_id)


@lru_cache(maxsize=1)
def get_default_registry() -> HashTypeRegistry:
    """
    Process-wide standard registry.

    The default type id is read from settings once, when the registry
    is first requested.
    """
    return build_standard_registry(get_settings().default_hash_type_id)
