from .functions import DigestHashFunction, HashFunction, Type2HashFunction
from .types import HashAlgorithm, HashType
from .registry import (
    HashTypeRegistry,
    build_standard_registry,
    get_default_registry,
)
from .value import NIL_HASH, Hash
from .factory import CompositePart, HashFactory
from .provider import HashProvider, get_hash_provider

__all__ = [
    "DigestHashFunction",
    "HashFunction",
    "Type2HashFunction",
    "HashAlgorithm",
    "HashType",
    "HashTypeRegistry",
    "build_standard_registry",
    "get_default_registry",
    "NIL_HASH",
    "Hash",
    "CompositePart",
    "HashFactory",
    "HashProvider",
    "get_hash_provider",
]
