"""
Engine configuration for one-time token generation.

Defaults
--------
    algorithm          sha1
    expiration         300 seconds
    digits             6       (valid range 1..9)
    truncation_offset  15
    add_checksum       False
"""

from dataclasses import dataclass
from enum import Enum


class Algorithm(str, Enum):
    """Commonly used HMAC algorithms."""

    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"


# ── Defaults ──────────────────────────────────────────────────────────────────

DEFAULT_ALGORITHM = Algorithm.SHA1.value
DEFAULT_EXPIRATION = 300
DEFAULT_DIGITS = 6
DEFAULT_TRUNCATION_OFFSET = 15

MIN_DIGITS = 1
MAX_DIGITS = 9


# ── Data model ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OTTConfig:
    """Immutable snapshot of everything that shapes a generated code."""

    algorithm: str = DEFAULT_ALGORITHM
    expiration: int = DEFAULT_EXPIRATION      # seconds, always > 0
    digits: int = DEFAULT_DIGITS              # 1..9
    truncation_offset: int = DEFAULT_TRUNCATION_OFFSET
    add_checksum: bool = False

    @property
    def code_length(self) -> int:
        """Length of the generated code string."""
        return self.digits + 1 if self.add_checksum else self.digits
