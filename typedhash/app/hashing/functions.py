"""
Hash function implementations.

A hash function is a stateful digest accumulator: update() may be
called any number of times, digest() finalizes and resets it.

The set of implementations is closed. Each one backs a registered hash
type, and the registered types are a permanent wire contract:

- DigestHashFunction: one standard hashlib algorithm (SHA-256 for
  type 1).
- Type2HashFunction: the 23 byte hybrid used by type 2.

None of these classes are thread-safe. A function is owned by exactly
one HashFactory.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, Union

from typedhash.app.errors import CodingFault

BytesLike = Union[bytes, bytearray, memoryview]


class HashFunction(Protocol):
    """
    Interface shared by all hash function implementations.
    """

    def update(self, data: BytesLike) -> None:
        ...

    def digest(self) -> bytes:
        ...

    def digest_of(self, data: BytesLike) -> bytes:
        ...


def _new_digest(name: str):
    try:
        return hashlib.new(name)
    except (ValueError, TypeError) as exc:
        raise CodingFault(f"Unsupported digest algorithm '{name}'") from exc


class DigestHashFunction:
    """Delegates to a single hashlib digest."""

    def __init__(self, digest_name: str) -> None:
        self._digest_name = digest_name
        self._digest = _new_digest(digest_name)

    @property
    def digest_name(self) -> str:
        return self._digest_name

    @property
    def digest_size(self) -> int:
        return self._digest.digest_size

    def update(self, data: BytesLike) -> None:
        self._digest.update(data)

    def digest(self) -> bytes:
        result = self._digest.digest()
        self._digest = hashlib.new(self._digest_name)
        return result

    def digest_of(self, data: BytesLike) -> bytes:
        self.update(data)
        return self.digest()


class Type2HashFunction:
    """
    Hybrid SHA-256 / SHA-1 digest with a fixed 23 byte output.

    All input goes to SHA-256. On finalize the SHA-256 output is hashed
    with SHA-1; the 20 SHA-1 bytes become the head of the result and
    the remaining bytes are taken from the SHA-256 output at the same
    offsets.

    The result is shorter than a SHA-256 digest at the cost of some
    collision margin. The byte layout must not change: existing type 2
    identifiers depend on it.
    """

    LENGTH = 23

    def __init__(self) -> None:
        self._sha256 = _new_digest("sha256")

    @property
    def digest_size(self) -> int:
        return self.LENGTH

    def update(self, data: BytesLike) -> None:
        self._sha256.update(data)

    def digest(self) -> bytes:
        sha256_hash = self._sha256.digest()
        self._sha256 = hashlib.sha256()

        sha1_hash = hashlib.sha1(sha256_hash).digest()

        # SHA-256 output is long enough to fill the tail.
        return sha1_hash + sha256_hash[len(sha1_hash):self.LENGTH]

    def digest_of(self, data: BytesLike) -> bytes:
        self.update(data)
        return self.digest()
