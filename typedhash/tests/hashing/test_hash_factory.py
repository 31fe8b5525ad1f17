"""
Tests for HashFactory single and composite hashing.
"""

import pytest

from typedhash.app.errors import BadFormatError, CodingFault
from typedhash.app.hashing.factory import HashFactory, composite_part_bytes
from typedhash.app.hashing.value import NIL_HASH, Hash

from typedhash.tests.fixtures.vectors import (
    COMPOSITE_SWAPPED_TYPE1_HEX,
    COMPOSITE_TYPE1_HEX,
    COMPOSITE_TYPE2_HEX,
    HELLO_WORLD,
    HELLO_WORLD_TYPE1_HEX,
    HELLO_WORLD_TYPE2_HEX,
    PRINCIPAL_HASH_HEX,
    SECURITY_CONTEXT_HASH_HEX,
    SAMPLE_BYTES,
)


def _principal() -> Hash:
    return Hash.of_hex_string(PRINCIPAL_HASH_HEX)


def _security_context() -> Hash:
    return Hash.of_hex_string(SECURITY_CONTEXT_HASH_HEX)


# ---------------------------------------------------------------------------
# Single hashes
# ---------------------------------------------------------------------------

def test_type1_hash_of_known_input():
    value = HashFactory(1).get_hash_of(HELLO_WORLD)

    assert value.type_id == 1
    assert value.to_hex() == HELLO_WORLD_TYPE1_HEX


def test_type2_hash_of_known_input():
    value = HashFactory(2).get_hash_of(HELLO_WORLD)

    assert value.type_id == 2
    assert value.to_hex() == HELLO_WORLD_TYPE2_HEX


def test_default_factory_uses_type1():
    factory = HashFactory()

    assert factory.hash_type_id == 1
    assert factory.get_hash_of(HELLO_WORLD).to_hex() == HELLO_WORLD_TYPE1_HEX


def test_repeated_hashing_is_deterministic():
    factory = HashFactory(1)

    assert factory.get_hash_of(HELLO_WORLD) == factory.get_hash_of(HELLO_WORLD)


def test_input_buffer_is_not_mutated():
    data = bytearray(HELLO_WORLD)

    HashFactory(1).get_hash_of(data)

    assert bytes(data) == HELLO_WORLD


@pytest.mark.parametrize("type_id", [0, 3, -1])
def test_factory_rejects_nil_and_unknown_types(type_id):
    with pytest.raises(BadFormatError):
        HashFactory(type_id)


# ---------------------------------------------------------------------------
# Composite hashes
# ---------------------------------------------------------------------------

def test_composite_hash_known_answer():
    value = HashFactory(1).get_composite_hash_of(
        "Principal",
        _principal(),
        "SecurityContext",
        _security_context(),
    )

    assert value.to_hex() == COMPOSITE_TYPE1_HEX


def test_composite_hash_depends_on_order():
    # Labels stay in place, the two hashes swap
    value = HashFactory(1).get_composite_hash_of(
        "Principal",
        _security_context(),
        "SecurityContext",
        _principal(),
    )

    assert value.to_hex() == COMPOSITE_SWAPPED_TYPE1_HEX
    assert value.to_hex() != COMPOSITE_TYPE1_HEX


def test_composite_hash_of_type2():
    value = HashFactory(2).get_composite_hash_of(
        "Principal",
        _principal(),
        "SecurityContext",
        _security_context(),
    )

    assert value.type_id == 2
    assert value.to_hex() == COMPOSITE_TYPE2_HEX


def test_composite_hash_is_deterministic():
    factory = HashFactory(1)
    parts = ("Principal", _principal(), "SecurityContext", _security_context())

    assert factory.get_composite_hash_of(*parts) == factory.get_composite_hash_of(*parts)


def test_composite_hash_feeds_encoded_hash_bytes():
    """
    A Hash element contributes its full encoded form, type tag included.
    """
    factory = HashFactory(1)
    principal = _principal()

    assert factory.get_composite_hash_of(principal) == factory.get_hash_of(
        principal.to_bytes()
    )
    assert factory.get_composite_hash_of(principal) != factory.get_hash_of(
        principal.digest_bytes
    )


def test_composite_scalar_parts():
    factory = HashFactory(1)
    expected = factory.get_hash_of(b"Principal42")

    assert factory.get_composite_hash_of("Principal", 42) == expected
    assert factory.get_composite_hash_of(b"Principal", b"42") == expected
    assert factory.get_composite_hash_of(bytearray(b"Principal"), memoryview(b"42")) == expected


def test_empty_composite_is_hash_of_nothing():
    factory = HashFactory(1)

    assert factory.get_composite_hash_of() == factory.get_hash_of(b"")


def test_composite_rejects_nil_hash():
    with pytest.raises(CodingFault) as exc_info:
        HashFactory(1).get_composite_hash_of("Principal", NIL_HASH)

    assert "NIL_HASH" in str(exc_info.value)


@pytest.mark.parametrize("part", [None, 1.5, True, ["x"], object()])
def test_composite_rejects_unsupported_parts(part):
    with pytest.raises(CodingFault):
        HashFactory(1).get_composite_hash_of("Principal", part)


def test_rejected_part_leaves_factory_usable():
    factory = HashFactory(1)

    with pytest.raises(CodingFault):
        factory.get_composite_hash_of("noise", NIL_HASH)

    assert factory.get_hash_of(HELLO_WORLD).to_hex() == HELLO_WORLD_TYPE1_HEX
    assert factory.get_composite_hash_of(
        "Principal",
        _principal(),
        "SecurityContext",
        _security_context(),
    ).to_hex() == COMPOSITE_TYPE1_HEX


def test_composite_part_bytes():
    assert composite_part_bytes("é") == "é".encode("utf-8")
    assert composite_part_bytes(-7) == b"-7"
    assert composite_part_bytes(Hash(SAMPLE_BYTES)) == SAMPLE_BYTES
