"""
Hash factories.

A HashFactory owns one hash function of one hash type and turns input
bytes into Hash values. Factories are NOT thread-safe: the hash function
is a mutable accumulator and concurrent use corrupts the digest in
progress. Callers that need concurrency either own one factory per
thread or go through HashProvider.

Composite hashes:
    get_composite_hash_of() feeds an ordered sequence of parts into a
    single digest. The order is part of the contract: the same parts in
    the same order always give the same Hash, and reordering them gives
    a different one.

    Accepted parts (CompositePart):
    - Hash: its canonical encoded bytes, type tag included.
      NIL_HASH is rejected with CodingFault.
    - bytes, bytearray, memoryview: verbatim.
    - str: UTF-8 bytes.
    - int: UTF-8 bytes of its decimal text.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from typedhash.app.errors import BadFormatError, CodingFault, ProgramFault
from typedhash.app.hashing.functions import BytesLike
from typedhash.app.hashing.registry import HashTypeRegistry, get_default_registry
from typedhash.app.hashing.value import Hash

logger = logging.getLogger(__name__)

CompositePart = Union[Hash, bytes, bytearray, memoryview, str, int]


def composite_part_bytes(part: CompositePart) -> bytes:
    """
    Byte contribution of one composite hash element.

    Raises CodingFault for NIL_HASH and for unsupported element types.
    """
    if isinstance(part, Hash):
        if part.is_nil:
            raise CodingFault(
                "NIL_HASH (null value) included as element of composite hash"
            )
        return part.to_bytes()

    if isinstance(part, (bytes, bytearray, memoryview)):
        return bytes(part)

    if isinstance(part, str):
        return part.encode("utf-8")

    if isinstance(part, int) and not isinstance(part, bool):
        return str(part).encode("utf-8")

    raise CodingFault(
        f"Unsupported composite hash element type {type(part).__name__}"
    )


class HashFactory:
    """
    Computes hashes of a single hash type.

    Not thread-safe.
    """

    def __init__(
        self,
        type_id: Optional[int] = None,
        registry: Optional[HashTypeRegistry] = None,
    ) -> None:
        self._registry = registry if registry is not None else get_default_registry()

        hash_type = (
            self._registry.default_type
            if type_id is None
            else self._registry.get(type_id)
        )

        if hash_type.is_nil:
            raise BadFormatError("Cannot create a factory for the NIL hash type")

        self._hash_type = hash_type
        self._hash_function = hash_type.create_hash_function()

    @property
    def hash_type_id(self) -> int:
        return self._hash_type.type_id

    def get_hash_of(self, data: BytesLike) -> Hash:
        """Hash ``data`` in a single shot."""
        return self._wrap(self._hash_function.digest_of(data))

    def get_composite_hash_of(self, *parts: CompositePart) -> Hash:
        """
        Hash the given parts, in order, as one digest.
        """
        # A rejected part must leave the accumulator untouched.
        chunks: List[bytes] = [composite_part_bytes(part) for part in parts]

        for chunk in chunks:
            self._hash_function.update(chunk)

        return self._wrap(self._hash_function.digest())

    def _wrap(self, digest: bytes) -> Hash:
        try:
            return Hash.from_digest(
                self._hash_type.type_id,
                digest,
                registry=self._registry,
            )
        except BadFormatError as exc:
            logger.error(
                "unexpected_hash_error",
                extra={"type_id": self._hash_type.type_id},
            )
            raise ProgramFault("Unexpected hash error") from exc
