"""
Code derivation: moving factor, keyed hash and dynamic truncation.

The moving factor is the reference time quantised to the expiration window.
It is packed as an 8-byte big-endian counter, HMAC'd with the secret and
reduced to a short decimal code the way RFC 4226 §5.3 truncates, except that
the truncation offset may be fixed by configuration.
"""

import hmac
import logging
import struct
from typing import Iterator, Optional

from ott.checksum import calc_checksum
from ott.config import MAX_DIGITS, MIN_DIGITS, OTTConfig
from ott.utils import SecretKey, codes_match, encode_secret, resolve_algorithm

logger = logging.getLogger(__name__)

# 10**0 .. 10**9
POWERS_OF_TEN = tuple(10**i for i in range(MAX_DIGITS + 1))

_TRUNCATE_BYTES = 4


# ── Moving factor ─────────────────────────────────────────────────────────────

def moving_factor(reference_time: int, expiration: int) -> int:
    """Index of the window containing ``reference_time``."""
    return reference_time // expiration


def lookback_factor(reference_time: int, expiration: int) -> int:
    """Index of the window half an expiration period before ``reference_time``."""
    return (reference_time - expiration // 2) // expiration


def pack_factor(factor: int) -> bytes:
    """Serialise a moving factor as 8 bytes, most significant first."""
    return struct.pack(">Q", factor & 0xFFFFFFFFFFFFFFFF)


# ── Keyed hash / truncation ───────────────────────────────────────────────────

def keyed_hash(secret: SecretKey, message: bytes, algorithm: str) -> bytes:
    """HMAC ``message`` with ``secret``; unknown algorithms fall back to SHA-1."""
    return hmac.new(encode_secret(secret), message, resolve_algorithm(algorithm)).digest()


def truncation_start(digest: bytes, truncation_offset: Optional[int]) -> int:
    """
    Pick the index of the four bytes to extract from ``digest``.

    A configured offset is used when ``0 <= offset < len(digest) - 4``;
    otherwise the offset comes from the low nibble of the last byte.
    """
    limit = len(digest) - _TRUNCATE_BYTES
    if truncation_offset is not None and 0 <= truncation_offset < limit:
        return truncation_offset
    if truncation_offset is not None:
        logger.debug(
            "Truncation offset %d out of range for a %d-byte digest, using dynamic offset",
            truncation_offset,
            len(digest),
        )
    # Short digests (e.g. MD5) cannot hold every nibble value.
    return min(digest[-1] & 0x0F, limit)


def truncate(digest: bytes, offset: int) -> int:
    """Compose four bytes at ``offset`` into a 31-bit non-negative integer."""
    return (
        (digest[offset] & 0x7F) << 24
        | (digest[offset + 1] & 0xFF) << 16
        | (digest[offset + 2] & 0xFF) << 8
        | (digest[offset + 3] & 0xFF)
    )


def derive_code(secret: SecretKey, factor: int, config: OTTConfig) -> str:
    """
    Derive the code for one moving factor.

    Args:
        secret: Shared secret key.
        factor: Moving factor (window index).
        config: Engine configuration.

    Returns:
        Zero-padded code of ``config.code_length`` characters.
    """
    digits = min(max(config.digits, MIN_DIGITS), MAX_DIGITS)
    digest = keyed_hash(secret, pack_factor(factor), config.algorithm)

    offset = truncation_start(digest, config.truncation_offset)
    code = truncate(digest, offset) % POWERS_OF_TEN[digits]

    if config.add_checksum:
        code = code * 10 + calc_checksum(code, digits)
        digits += 1
    return str(code).zfill(digits)


# ── Generate / validate ───────────────────────────────────────────────────────

def generate_code(secret: SecretKey, reference_time: int, config: OTTConfig) -> str:
    """Return the code for the window containing ``reference_time``."""
    return derive_code(secret, moving_factor(reference_time, config.expiration), config)


def acceptable_codes(
    secret: SecretKey, reference_time: int, config: OTTConfig
) -> Iterator[str]:
    """
    Yield the codes a validator accepts, current window first.

    The look-back window starts half an expiration period earlier, so a code
    stays acceptable for up to ``expiration // 2`` seconds after its window
    ends. Codes from later windows are never accepted.
    """
    yield generate_code(secret, reference_time, config)
    yield derive_code(secret, lookback_factor(reference_time, config.expiration), config)


def validate_code(
    candidate: object,
    secret: SecretKey,
    reference_time: int,
    config: OTTConfig,
) -> bool:
    """Return True if ``candidate`` matches the current or look-back window."""
    return any(
        codes_match(candidate, code)
        for code in acceptable_codes(secret, reference_time, config)
    )
