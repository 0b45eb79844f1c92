"""
Stateful one-time token engine.

An engine is bound to the moment it was created: the reference time is
captured once in the constructor and reused by every generate/validate call.
Configuration is held as an immutable :class:`~ott.config.OTTConfig`; setters
swap in a new value and report success as a bool instead of raising.
"""

import dataclasses
import logging
import time
from typing import Optional

from ott import derive
from ott.checksum import calc_checksum
from ott.config import (
    DEFAULT_DIGITS,
    DEFAULT_EXPIRATION,
    OTTConfig,
)
from ott.utils import (
    SecretKey,
    algorithm_name,
    codes_match,
    resolve_algorithm,
    validate_digits,
    validate_expiration,
    validate_truncation_offset,
)

logger = logging.getLogger(__name__)


class OneTimeToken:
    """Generate and validate time-windowed one-time codes for one secret."""

    def __init__(
        self,
        secret_key: Optional[SecretKey] = None,
        expiration: Optional[int] = None,
        digits: Optional[int] = None,
        *,
        reference_time: Optional[int] = None,
    ) -> None:
        """
        Args:
            secret_key:     Shared secret (bytes or text).  May be set later
                            with :meth:`set_secret_key`.
            expiration:     Window length in seconds (default 300).
            digits:         Code length without checksum, 1..9 (default 6).
            reference_time: Epoch seconds to bind the engine to.  Defaults
                            to the current time.
        """
        self._reference_time = int(time.time() if reference_time is None else reference_time)
        self._config = OTTConfig()
        self._secret: SecretKey = b""
        self._generated_code: Optional[str] = None

        if secret_key is not None:
            self.set_secret_key(secret_key)
        if expiration is not None:
            self.set_expiration_window(expiration)
        if digits is not None:
            self.set_digit_count(digits)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reference_time={self._reference_time}, config={self._config!r})"

    # ── Read-only state ───────────────────────────────────────────────────

    @property
    def config(self) -> OTTConfig:
        return self._config

    @property
    def reference_time(self) -> int:
        return self._reference_time

    @property
    def generated_code(self) -> Optional[str]:
        return self._generated_code

    def get_reference_time(self) -> int:
        """Return the timestamp every code of this engine is derived from."""
        return self._reference_time

    def get_generated_code(self) -> Optional[str]:
        """Return the code computed by the last generate/validate call."""
        return self._generated_code

    def get_expiration_window(self) -> int:
        return self._config.expiration

    def get_digit_count(self) -> int:
        return self._config.digits

    def get_truncation_offset(self) -> int:
        return self._config.truncation_offset

    def is_checksum_enabled(self) -> bool:
        return self._config.add_checksum

    def get_algorithm(self) -> str:
        return self._config.algorithm

    # ── Configuration ─────────────────────────────────────────────────────

    def _update(self, **changes: object) -> None:
        self._config = dataclasses.replace(self._config, **changes)

    def set_secret_key(self, secret_key: Optional[SecretKey]) -> bool:
        """
        Set the shared secret.

        Returns:
            True if adopted; False for an empty key or one that is not
            text or bytes, which leaves the previous secret in place.
        """
        if not isinstance(secret_key, (str, bytes, bytearray)):
            logger.debug("Rejected secret key of type %s", type(secret_key).__name__)
            return False
        if not secret_key:
            logger.debug("Rejected empty secret key")
            return False
        self._secret = secret_key
        return True

    def set_expiration_window(self, seconds: object) -> bool:
        """
        Set the window length in seconds.

        Anything that is not a positive integer resets the window to
        ``DEFAULT_EXPIRATION`` and returns False.
        """
        try:
            self._update(expiration=validate_expiration(seconds))
            return True
        except ValueError:
            logger.debug("Invalid expiration %r, using %d", seconds, DEFAULT_EXPIRATION)
            self._update(expiration=DEFAULT_EXPIRATION)
            return False

    def set_digit_count(self, digits: object) -> bool:
        """
        Set the number of code digits (1..9).

        Out-of-range input resets to ``DEFAULT_DIGITS`` and returns False.
        """
        try:
            self._update(digits=validate_digits(digits))
            return True
        except ValueError:
            logger.debug("Invalid digit count %r, using %d", digits, DEFAULT_DIGITS)
            self._update(digits=DEFAULT_DIGITS)
            return False

    def set_truncation_offset(self, offset: object) -> bool:
        """Set a fixed truncation offset; negative input is ignored."""
        try:
            self._update(truncation_offset=validate_truncation_offset(offset))
            return True
        except ValueError:
            logger.debug("Ignored invalid truncation offset %r", offset)
            return False

    def set_checksum_enabled(self, enabled: bool) -> None:
        """Append (or stop appending) a check digit to generated codes."""
        self._update(add_checksum=bool(enabled))

    def set_algorithm(self, algorithm: object) -> bool:
        """
        Choose the HMAC hash.

        Unknown names select the default algorithm and return False.
        """
        resolved = resolve_algorithm(algorithm)
        self._update(algorithm=resolved)
        return resolved == algorithm_name(algorithm)

    # ── Codes ─────────────────────────────────────────────────────────────

    calc_checksum = staticmethod(calc_checksum)

    def generate_code(self) -> str:
        """
        Compute the code for the reference time's window.

        Without a secret the code is derived from an empty key.
        """
        if not self._secret:
            logger.warning("Generating a code without a secret key")
        self._generated_code = derive.generate_code(
            self._secret, self._reference_time, self._config
        )
        return self._generated_code

    def validate_code(self, candidate: object) -> bool:
        """
        Check ``candidate`` against the current window, then the look-back one.

        The last code computed is kept as :attr:`generated_code`. Nothing is
        accepted while no secret is set.
        """
        if not self._secret:
            logger.debug("Rejected code, no secret key set")
            return False
        config = self._config
        for code in derive.acceptable_codes(self._secret, self._reference_time, config):
            self._generated_code = code
            if codes_match(candidate, code):
                return True
        return False
