"""
Request and response schemas for the typed hash HTTP surface.

Composite hash requests carry an explicit, discriminated list of parts
(text, hash, raw bytes). The order of the list is the order in which
the parts are hashed.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field

from typedhash.app.hashing import (
    CompositePart,
    Hash,
    HashAlgorithm,
    HashType,
    HashTypeRegistry,
)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

class HashView(BaseModel):
    """
    All projections of a single Hash.
    """

    type_id: int
    digest_length: int
    hex: str
    base64: str
    base64_url: str = Field(..., description="Canonical text form")
    is_nil: bool

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @classmethod
    def from_hash(cls, value: Hash) -> "HashView":
        return cls(
            type_id=value.type_id,
            digest_length=value.hash_type.digest_length,
            hex=value.to_hex(),
            base64=value.to_base64(),
            base64_url=value.to_base64_url(),
            is_nil=value.is_nil,
        )


class HashTypeView(BaseModel):
    """
    Public description of a registered hash type.
    """

    type_id: int
    algorithm: HashAlgorithm
    digest_length: int
    text_suffix: str

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @classmethod
    def from_hash_type(cls, hash_type: HashType) -> "HashTypeView":
        return cls(
            type_id=hash_type.type_id,
            algorithm=hash_type.algorithm,
            digest_length=hash_type.digest_length,
            text_suffix=hash_type.text_suffix,
        )


# ---------------------------------------------------------------------------
# Composite hash request
# ---------------------------------------------------------------------------

class TextPart(BaseModel):
    kind: Literal["text"]
    value: str

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_part(self, registry: Optional[HashTypeRegistry] = None) -> CompositePart:
        return self.value


class HashPart(BaseModel):
    kind: Literal["hash"]
    value: str
    encoding: Literal["base64", "hex"] = "base64"

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_part(self, registry: Optional[HashTypeRegistry] = None) -> CompositePart:
        """
        Decode the referenced Hash against ``registry``.

        Raises BadFormatError if the value is malformed.
        """
        if self.encoding == "hex":
            return Hash.of_hex_string(self.value, registry)
        return Hash.of_base64_string(self.value, registry)


class BytesPart(BaseModel):
    kind: Literal["bytes"]
    value: Base64Bytes

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_part(self, registry: Optional[HashTypeRegistry] = None) -> CompositePart:
        return self.value


CompositePartIn = Annotated[
    Union[TextPart, HashPart, BytesPart],
    Field(discriminator="kind"),
]


class CompositeHashRequest(BaseModel):
    """
    Ordered parts of a composite hash.
    """

    type_id: Optional[int] = Field(
        None,
        description="Hash type to compute (default type when omitted)",
    )
    parts: List[CompositePartIn] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
