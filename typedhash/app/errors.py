"""
Error taxonomy for typed hash identifiers.

Two families are defined here:

- BadFormatError: the input came from outside (a stored identifier,
  a request parameter) and is malformed. Callers reject the input.
- AbstractFault and its subclasses: unchecked failures. A ProgramFault
  or CodingFault means an internal invariant was violated and the
  current operation cannot continue. A TransactionFault is raised by
  lenient constructors for callers that treat malformed identifiers as
  impossible but must not crash the thread.

Faults are never retried; there is no transient failure mode here.
"""

from __future__ import annotations


class BadFormatError(ValueError):
    """Raised when an encoded hash or hash type id is malformed."""


class AbstractFault(RuntimeError):
    """Base class for unchecked faults."""


class ProgramFault(AbstractFault):
    """Raised when an internal invariant does not hold."""


class CodingFault(ProgramFault):
    """
    Raised for programming defects.

    Examples: a registry entry that cannot build its hash function,
    or NIL_HASH passed as an element of a composite hash.
    """


class TransactionFault(AbstractFault):
    """
    Unchecked wrapper around a BadFormatError.

    The wrapped error is always available as ``__cause__``.
    """
