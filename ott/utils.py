"""
Utility helpers for the OTT engine.
"""

import hashlib
import hmac
import logging
from enum import Enum
from typing import Optional, Union

from ott.config import DEFAULT_ALGORITHM, MAX_DIGITS, MIN_DIGITS

logger = logging.getLogger(__name__)

SecretKey = Union[bytes, bytearray, str]


# ── Coercion / validation ─────────────────────────────────────────────────────

def _as_int(value: object) -> int:
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"Expected an integer, got {value!r}.") from exc


def validate_digits(digits: object) -> int:
    """
    Coerce and check a digit count.

    Returns:
        The digit count as an int.

    Raises:
        ValueError: If it is not an integer in ``MIN_DIGITS..MAX_DIGITS``.
    """
    n = _as_int(digits)
    if not MIN_DIGITS <= n <= MAX_DIGITS:
        raise ValueError(f"Digits must be between {MIN_DIGITS} and {MAX_DIGITS}.")
    return n


def validate_expiration(seconds: object) -> int:
    """Coerce and check an expiration window; it must be a positive integer."""
    n = _as_int(seconds)
    if n <= 0:
        raise ValueError("Expiration must be a positive number of seconds.")
    return n


def validate_truncation_offset(offset: object) -> int:
    """Coerce and check a truncation offset; it must be non-negative."""
    n = _as_int(offset)
    if n < 0:
        raise ValueError("Truncation offset must be non-negative.")
    return n


# ── Secrets / algorithms ──────────────────────────────────────────────────────

def encode_secret(secret: SecretKey) -> bytes:
    """Return the raw key bytes; text secrets are UTF-8 encoded."""
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return bytes(secret)


def algorithm_name(name: object) -> Optional[str]:
    """Normalise an algorithm name to lower case; None if it is not a name."""
    if isinstance(name, Enum):
        name = name.value
    if isinstance(name, str):
        return name.strip().lower()
    return None


def resolve_algorithm(name: object) -> str:
    """
    Map ``name`` to a hashlib algorithm usable with HMAC.

    Unknown names, and variable-length digests such as SHAKE, resolve to
    ``DEFAULT_ALGORITHM``. This never raises.

    Args:
        name: An :class:`~ott.config.Algorithm` member or a hashlib name.

    Returns:
        Lower-case hashlib algorithm name.
    """
    candidate = algorithm_name(name)
    if candidate is not None:
        try:
            if hashlib.new(candidate).digest_size > 0:
                return candidate
        except ValueError:
            pass
    logger.debug("Unsupported hash algorithm %r, using %s", name, DEFAULT_ALGORITHM)
    return DEFAULT_ALGORITHM


# ── Comparison ────────────────────────────────────────────────────────────────

def codes_match(candidate: object, expected: str) -> bool:
    """
    Constant-time comparison of a user-supplied code with an expected one.

    Surrounding whitespace on the candidate is ignored. The outcome is the
    same as ``candidate == expected``.
    """
    if candidate is None:
        return False
    token = str(candidate).strip()
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))
