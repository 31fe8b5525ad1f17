"""
Hash type descriptors.

A HashType binds a numeric type id to a hashing algorithm, a digest
length and the encoded forms of the id that are appended to every
identifier of that type:

    bytes: [ digest ][ type id, big-endian, N bytes ][ N ]
    hex:   [ digest as uppercase hex ][ type id as hex ][ hex digit count ]

Descriptors are validated once, at construction. A descriptor that is
inconsistent, or whose hash function cannot be built, is a programming
defect and raises CodingFault rather than a validation error.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from typedhash.app.errors import CodingFault
from typedhash.app.hashing.functions import (
    DigestHashFunction,
    HashFunction,
    Type2HashFunction,
)

MAX_TYPE_ID_BYTES = 15


# ----------------------------------------------------------------------
# Algorithms (closed, versioned)
# ----------------------------------------------------------------------
class HashAlgorithm(str, Enum):
    """
    Hash function variant backing a hash type.

    NOTE:
    Every value here is referenced by a registered type id.
    Values may be added but never removed or renamed.
    """

    NIL = "nil"
    DIGEST = "digest"
    TYPE2 = "type2"


def type_id_to_bytes(type_id: int) -> bytes:
    """Minimal big-endian encoding of a type id (empty for 0)."""
    return type_id.to_bytes((type_id.bit_length() + 7) // 8, "big")


# ----------------------------------------------------------------------
# Descriptor
# ----------------------------------------------------------------------
class HashType(BaseModel):
    """
    Immutable descriptor of one registered hash type.
    """

    type_id: int = Field(..., ge=0)
    algorithm: HashAlgorithm
    digest_length: int = Field(..., ge=0)
    type_id_bytes: bytes = b""
    digest_name: Optional[str] = Field(
        None,
        description="hashlib algorithm name, DIGEST types only",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "HashType":
        if len(self.type_id_bytes) > MAX_TYPE_ID_BYTES:
            raise CodingFault(
                "Hash typeId may not exceed 15 bytes length, (1 digit of Hex)"
            )

        if self.type_id_bytes != type_id_to_bytes(self.type_id):
            raise CodingFault(
                f"Hash type {self.type_id} has inconsistent type id bytes "
                f"{self.type_id_bytes.hex()}"
            )

        if self.algorithm is HashAlgorithm.NIL:
            if self.digest_length != 0 or self.type_id != 0:
                raise CodingFault("NIL hash type must be type 0 with no digest")
            return self

        if self.algorithm is HashAlgorithm.DIGEST and not self.digest_name:
            raise CodingFault(
                f"Hash type {self.type_id} requires a digest algorithm name"
            )

        # Unknown digests fail here, at registration.
        size = self.create_hash_function().digest_size
        if size != self.digest_length:
            raise CodingFault(
                f"Hash type {self.type_id} declares {self.digest_length} "
                f"byte digests but its function produces {size}"
            )
        return self

    # ------------------------------------------------------------------
    # Derived forms
    # ------------------------------------------------------------------

    @property
    def is_nil(self) -> bool:
        return self.algorithm is HashAlgorithm.NIL

    @property
    def text_suffix(self) -> str:
        """
        Hex suffix appended to every hex encoded hash of this type.

        Type 1 gives "11": the id "1" followed by "1", the number of hex
        digits used for the id.
        """
        if self.is_nil:
            return "0"
        type_id_hex = f"{self.type_id:X}"
        return f"{type_id_hex}{len(type_id_hex):X}"

    @property
    def encoded_length(self) -> int:
        return self.digest_length + len(self.type_id_bytes) + 1

    def create_hash_function(self) -> HashFunction:
        if self.algorithm is HashAlgorithm.DIGEST:
            return DigestHashFunction(self.digest_name)
        if self.algorithm is HashAlgorithm.TYPE2:
            return Type2HashFunction()
        raise CodingFault(f"Hash type {self.type_id} has no hash function")

    def encode(self, digest: bytes) -> bytes:
        """Append the type tag to a raw digest."""
        return bytes(digest) + self.type_id_bytes + bytes((len(self.type_id_bytes),))
