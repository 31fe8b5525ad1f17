"""
Typed hash identifier values.

A Hash is an immutable, self-describing digest. Its canonical byte form
appends the type tag to the digest:

    [ digest (digest_length bytes) ][ type id (N bytes, big-endian) ][ N ]

The tag is appended rather than prepended so that identifiers keep the
distribution of their digest prefix when used as sort or partition
keys. The NIL Hash is the single byte b"\\x00".

Canonical text:
    The URL-safe base64 encoding of the canonical byte form (padded).
    str(), equality, ordering and hash() all derive from it. Hex with a
    type suffix and standard base64 are accepted as input and produced
    on request, but are never used for comparison.

Two kinds of entry point exist:

- strict (Hash(...), of_hex_string, of_base64_string, from_digest,
  build): malformed input raises BadFormatError.
- lenient (new_instance*): None or empty input gives NIL_HASH,
  malformed input raises TransactionFault.
"""

from __future__ import annotations

import base64
import binascii
from functools import total_ordering
from typing import Any, ClassVar, Dict, Optional, Union

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic_core import core_schema

from typedhash.app.errors import BadFormatError, TransactionFault
from typedhash.app.hashing.registry import (
    NIL_HASH_TYPE,
    HashTypeRegistry,
    get_default_registry,
)
from typedhash.app.hashing.types import HashType

BytesLike = Union[bytes, bytearray, memoryview]

NIL_BYTE_HASH = b"\x00"
NIL_STRING_HASH = "0"

_HEX_CHAR_TO_INT: Dict[str, int] = {
    c: int(c, 16) for c in "0123456789abcdefABCDEF"
}


def _hex_value(c: str) -> int:
    try:
        return _HEX_CHAR_TO_INT[c]
    except KeyError:
        raise BadFormatError(f'Invalid Hex character "{c}"') from None


def _resolve(registry: Optional[HashTypeRegistry]) -> HashTypeRegistry:
    return registry if registry is not None else get_default_registry()


def _type_from_hash_bytes(
    hash_bytes: bytes,
    registry: HashTypeRegistry,
) -> HashType:
    """
    Validate a canonical byte form and return its type.
    """
    if len(hash_bytes) == 0 or hash_bytes == NIL_BYTE_HASH:
        return registry.nil_type

    if len(hash_bytes) < 3:
        raise BadFormatError("Hash value is too short")

    length = len(hash_bytes) - 1
    type_id_len = hash_bytes[length]

    if type_id_len > length:
        raise BadFormatError("Hash value is too short")

    # Anything above 15 bytes fails the registry lookup below.
    type_id = int.from_bytes(hash_bytes[length - type_id_len:length], "big")
    length -= type_id_len

    hash_type = registry.get(type_id)

    if hash_type.is_nil:
        raise BadFormatError("NIL hash type may not carry a digest")

    if type_id_len != len(hash_type.type_id_bytes):
        raise BadFormatError(
            f"HashType {type_id} ids are {len(hash_type.type_id_bytes)} "
            f"bytes but this value uses {type_id_len}."
        )

    if length != hash_type.digest_length:
        raise BadFormatError(
            f"HashType {type_id} values are {hash_type.digest_length} "
            f"bytes but this value is {length} bytes."
        )

    return hash_type


def _decode_base64(text: str) -> bytes:
    """
    Decode standard or URL-safe base64, padded or not.
    """
    if not isinstance(text, str):
        raise BadFormatError(
            f"Expected base64 text, got {type(text).__name__}"
        )

    normalized = "".join(text.split()).replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)

    try:
        return base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BadFormatError(f"Invalid base64 hash value: {exc}") from exc


# ----------------------------------------------------------------------
# Hash
# ----------------------------------------------------------------------
@total_ordering
class Hash:
    """
    Immutable typed hash identifier.
    """

    __slots__ = ("_hash_bytes", "_hash_type", "_hex", "_base64", "_base64_url")

    NIL: ClassVar["Hash"]

    def __init__(
        self,
        hash_bytes: BytesLike,
        registry: Optional[HashTypeRegistry] = None,
    ) -> None:
        """
        Decode a Hash from its canonical byte form.

        Raises BadFormatError if the value is not a valid encoding.
        """
        if hash_bytes is None:
            raise BadFormatError("Hash value is null")
        if not isinstance(hash_bytes, (bytes, bytearray, memoryview)):
            raise BadFormatError(
                f"Expected bytes, got {type(hash_bytes).__name__}"
            )

        data = bytes(hash_bytes)
        hash_type = _type_from_hash_bytes(data, _resolve(registry))

        if hash_type.is_nil:
            data = NIL_BYTE_HASH

        self._setup(data, hash_type)

    def _setup(self, hash_bytes: bytes, hash_type: HashType) -> None:
        object.__setattr__(self, "_hash_bytes", hash_bytes)
        object.__setattr__(self, "_hash_type", hash_type)
        object.__setattr__(self, "_hex", self._to_hex_string(hash_bytes, hash_type))
        object.__setattr__(
            self, "_base64", base64.b64encode(hash_bytes).decode("ascii")
        )
        object.__setattr__(
            self,
            "_base64_url",
            base64.urlsafe_b64encode(hash_bytes).decode("ascii"),
        )

    @classmethod
    def _create(cls, hash_bytes: bytes, hash_type: HashType) -> "Hash":
        """Wrap an already validated canonical byte form."""
        instance = object.__new__(cls)
        instance._setup(hash_bytes, hash_type)
        return instance

    @staticmethod
    def _to_hex_string(hash_bytes: bytes, hash_type: HashType) -> str:
        if hash_type.is_nil:
            return NIL_STRING_HASH
        return hash_bytes[:hash_type.digest_length].hex().upper() + hash_type.text_suffix

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    # ------------------------------------------------------------------
    # Strict constructors
    # ------------------------------------------------------------------

    @classmethod
    def of_hex_string(
        cls,
        hash_hex_string: str,
        registry: Optional[HashTypeRegistry] = None,
    ) -> "Hash":
        """
        Decode a Hash from its hex representation.

        Surrounding whitespace is ignored and hex digits may be in either
        case. The last digit gives the number of hex digits used by the
        type id, which precede it.
        """
        if hash_hex_string is None:
            raise BadFormatError("Hash value is null")
        if not isinstance(hash_hex_string, str):
            raise BadFormatError(
                f"Expected hex text, got {type(hash_hex_string).__name__}"
            )

        text = hash_hex_string.strip()

        if text == NIL_STRING_HASH:
            return NIL_HASH

        if len(text) < 3:
            raise BadFormatError("Hash value is too short")

        length = len(text) - 1
        type_id_len = _hex_value(text[length])

        if type_id_len > length:
            raise BadFormatError("Hash value is too short")

        type_id = 0
        for c in text[length - type_id_len:length]:
            type_id = type_id * 16 + _hex_value(c)
        length -= type_id_len

        hash_type = _resolve(registry).get(type_id)

        if hash_type.is_nil:
            raise BadFormatError("NIL hash type may not carry a digest")

        if text[length:].upper() != hash_type.text_suffix:
            raise BadFormatError(
                f"HashType {type_id} values end in "
                f'"{hash_type.text_suffix}" but this value ends in '
                f'"{text[length:]}".'
            )

        if length != 2 * hash_type.digest_length:
            raise BadFormatError(
                f"HashType {type_id} values are {hash_type.digest_length} "
                f"bytes but this value is {length} hex digits."
            )

        digest = bytes(
            16 * _hex_value(text[i]) + _hex_value(text[i + 1])
            for i in range(0, length, 2)
        )

        return cls._create(hash_type.encode(digest), hash_type)

    @classmethod
    def of_base64_string(
        cls,
        base64_string: str,
        registry: Optional[HashTypeRegistry] = None,
    ) -> "Hash":
        """
        Decode a Hash from standard or URL-safe base64 text.
        """
        if base64_string is None:
            raise BadFormatError("Hash value is null")
        return cls(_decode_base64(base64_string), registry)

    @classmethod
    def from_digest(
        cls,
        type_id: int,
        digest: BytesLike,
        registry: Optional[HashTypeRegistry] = None,
    ) -> "Hash":
        """
        Wrap raw digest bytes of the given hash type.

        The digest may not be empty; use NIL_HASH for "no value".
        """
        if not digest:
            raise BadFormatError(
                "Null or zero length digest passed, use NIL_HASH if you "
                "really mean null"
            )

        hash_type = _resolve(registry).get(type_id)

        if len(digest) != hash_type.digest_length:
            raise BadFormatError(
                f"Hash Type {type_id} digest values are "
                f"{hash_type.digest_length} bytes but {len(digest)} were "
                "passed."
            )

        return cls._create(hash_type.encode(bytes(digest)), hash_type)

    @classmethod
    def build(
        cls,
        hash_bytes: BytesLike,
        registry: Optional[HashTypeRegistry] = None,
    ) -> "Hash":
        return cls(hash_bytes, registry)

    # ------------------------------------------------------------------
    # Lenient constructors
    # ------------------------------------------------------------------

    @classmethod
    def new_instance(cls, hash_bytes: Optional[BytesLike]) -> "Hash":
        """
        Decode canonical bytes, treating None or empty input as NIL_HASH.

        Raises TransactionFault if the value is malformed.
        """
        if hash_bytes is None or len(hash_bytes) == 0:
            return NIL_HASH

        try:
            return cls(hash_bytes)
        except BadFormatError as exc:
            raise TransactionFault(str(exc)) from exc

    @classmethod
    def new_instance_from_string(cls, base64_string: Optional[str]) -> "Hash":
        """
        Decode base64 text, treating None or "" as NIL_HASH.

        Raises TransactionFault if the value is malformed.
        """
        if not base64_string:
            return NIL_HASH

        try:
            return cls.of_base64_string(base64_string)
        except BadFormatError as exc:
            raise TransactionFault(str(exc)) from exc

    @classmethod
    def new_instance_from_hex(cls, hash_hex_string: Optional[str]) -> "Hash":
        """
        Decode hex text, treating None or "" as NIL_HASH.

        Raises TransactionFault if the value is malformed.
        """
        if not hash_hex_string:
            return NIL_HASH

        try:
            return cls.of_hex_string(hash_hex_string)
        except BadFormatError as exc:
            raise TransactionFault(str(exc)) from exc

    @classmethod
    def new_nullable_instance(
        cls, hash_bytes: Optional[BytesLike]
    ) -> Optional["Hash"]:
        """
        Decode canonical bytes, returning None for None or empty input.

        Raises BadFormatError if the value is malformed.
        """
        if hash_bytes is None or len(hash_bytes) == 0:
            return None
        return cls(hash_bytes)

    @staticmethod
    def as_bytes(hash_value: Optional["Hash"]) -> bytes:
        """Canonical bytes of ``hash_value``; None encodes as NIL."""
        if hash_value is None:
            return NIL_BYTE_HASH
        return hash_value.to_bytes()

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    @property
    def hash_type(self) -> HashType:
        return self._hash_type

    @property
    def type_id(self) -> int:
        return self._hash_type.type_id

    @property
    def is_nil(self) -> bool:
        return self._hash_type.is_nil

    @property
    def digest_bytes(self) -> bytes:
        """The digest without its type tag."""
        return self._hash_bytes[:self._hash_type.digest_length]

    def to_bytes(self) -> bytes:
        return self._hash_bytes

    def to_hex(self) -> str:
        return self._hex

    def to_base64(self) -> str:
        return self._base64

    def to_base64_url(self) -> str:
        return self._base64_url

    # ------------------------------------------------------------------
    # Identity (canonical text)
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return self._base64_url

    def __repr__(self) -> str:
        return f"Hash({self._hex!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._base64_url == other._base64_url

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._base64_url < other._base64_url

    def __hash__(self) -> int:
        return hash(self._base64_url)

    def __reduce__(self):
        # The type travels with the value so registry-specific types restore.
        return (_restore_hash, (self._hash_bytes, self._hash_type))

    # ------------------------------------------------------------------
    # Pydantic integration
    # ------------------------------------------------------------------

    @classmethod
    def _validate(cls, value: Any) -> "Hash":
        if isinstance(value, Hash):
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(value)
        if isinstance(value, str):
            return cls.of_base64_string(value)
        raise BadFormatError(f"Cannot build a Hash from {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="always"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls,
        schema: core_schema.CoreSchema,
        handler: GetJsonSchemaHandler,
    ) -> Dict[str, Any]:
        return {
            "type": "string",
            "format": "typed-hash",
            "description": "URL-safe base64 encoding of a typed hash",
        }


def _restore_hash(hash_bytes: bytes, hash_type: HashType) -> Hash:
    return Hash._create(hash_bytes, hash_type)


NIL_HASH = Hash._create(NIL_BYTE_HASH, NIL_HASH_TYPE)
Hash.NIL = NIL_HASH
