"""
OTT – time-windowed one-time codes with an optional check digit.

Example::

    from ott import OneTimeToken

    engine = OneTimeToken(b"shared secret", expiration=120, digits=6)
    code = engine.generate_code()
    engine.validate_code(code)  # True
"""

from ott.checksum import calc_checksum
from ott.config import Algorithm, OTTConfig
from ott.derive import generate_code, validate_code
from ott.engine import OneTimeToken

__all__ = [
    "Algorithm",
    "OTTConfig",
    "OneTimeToken",
    "calc_checksum",
    "generate_code",
    "validate_code",
]

__version__ = "1.0.0"
