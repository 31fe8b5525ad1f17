import pytest

from typedhash.app.errors import CodingFault
from typedhash.app.hashing.functions import DigestHashFunction, Type2HashFunction

from typedhash.tests.fixtures.vectors import (
    HELLO_WORLD,
    HELLO_WORLD_TYPE1_DIGEST,
    HELLO_WORLD_TYPE2_DIGEST,
)


# ---------------------------------------------------------------------------
# Plain digest
# ---------------------------------------------------------------------------

def test_digest_function_matches_sha256():
    function = DigestHashFunction("sha256")

    assert function.digest_of(HELLO_WORLD) == HELLO_WORLD_TYPE1_DIGEST
    assert function.digest_size == 32


def test_digest_function_resets_after_finalize():
    function = DigestHashFunction("sha256")

    function.update(b"noise")
    function.digest()

    assert function.digest_of(HELLO_WORLD) == HELLO_WORLD_TYPE1_DIGEST


def test_digest_function_accumulates_updates():
    function = DigestHashFunction("sha256")

    function.update(b"Hello ")
    function.update(bytearray(b"World"))
    function.update(memoryview(b"!"))

    assert function.digest() == HELLO_WORLD_TYPE1_DIGEST


def test_unknown_digest_algorithm_is_a_coding_fault():
    with pytest.raises(CodingFault):
        DigestHashFunction("no-such-digest")


# ---------------------------------------------------------------------------
# Type 2 hybrid digest
# ---------------------------------------------------------------------------

def test_type2_digest_is_23_bytes():
    digest = Type2HashFunction().digest_of(HELLO_WORLD)

    assert len(digest) == Type2HashFunction.LENGTH == 23


def test_type2_digest_known_answer():
    assert Type2HashFunction().digest_of(HELLO_WORLD) == HELLO_WORLD_TYPE2_DIGEST


def test_type2_digest_tail_comes_from_sha256():
    """
    Bytes 20..22 are copied from the SHA-256 digest at the same offsets.
    """
    digest = Type2HashFunction().digest_of(HELLO_WORLD)

    assert digest[20:] == HELLO_WORLD_TYPE1_DIGEST[20:23]


def test_type2_digest_is_deterministic_and_resets():
    function = Type2HashFunction()

    first = function.digest_of(HELLO_WORLD)
    second = function.digest_of(HELLO_WORLD)

    assert first == second
    assert function.digest_of(b"Hello World!0") != first
