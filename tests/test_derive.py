"""Tests for ott.derive."""

import pytest

from ott.config import Algorithm, OTTConfig
from ott.derive import (
    POWERS_OF_TEN,
    acceptable_codes,
    derive_code,
    generate_code,
    keyed_hash,
    lookback_factor,
    moving_factor,
    pack_factor,
    truncate,
    truncation_start,
    validate_code,
)

# ── RFC 4226 Appendix D ──────────────────────────────────────────────────────
RFC_SECRET = b"12345678901234567890"
RFC_HOTP_EXPECTED = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]
# Offset 16 is past the end of a SHA-1 digest, forcing dynamic truncation
DYNAMIC = OTTConfig(truncation_offset=16)


def test_powers_of_ten_table() -> None:
    assert len(POWERS_OF_TEN) == 10
    assert POWERS_OF_TEN[0] == 1
    assert POWERS_OF_TEN[9] == 1_000_000_000


# ── Moving factor ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "reference_time,expiration,current,lookback",
    [
        (0, 300, 0, -1),
        (299, 300, 0, 0),
        (449, 300, 1, 0),
        (450, 300, 1, 1),
        (599, 300, 1, 1),
        (1_000_000_000, 30, 33_333_333, 33_333_332),
    ],
)
def test_factors(reference_time: int, expiration: int, current: int, lookback: int) -> None:
    assert moving_factor(reference_time, expiration) == current
    assert lookback_factor(reference_time, expiration) == lookback


def test_pack_factor_big_endian() -> None:
    assert pack_factor(1) == b"\x00\x00\x00\x00\x00\x00\x00\x01"
    assert pack_factor(0x0102030405060708) == bytes(range(1, 9))
    assert len(pack_factor(0)) == 8


# ── Truncation ────────────────────────────────────────────────────────────────

def test_keyed_hash_rfc4226_intermediate() -> None:
    digest = keyed_hash(RFC_SECRET, pack_factor(0), "sha1")
    assert digest.hex() == "cc93cf18508d94934c64b65d8ba7667fb7cde4b0"


def test_keyed_hash_unknown_algorithm_falls_back() -> None:
    message = pack_factor(42)
    assert keyed_hash(RFC_SECRET, message, "not-a-hash") == keyed_hash(
        RFC_SECRET, message, "sha1"
    )


def test_keyed_hash_accepts_text_secret() -> None:
    message = pack_factor(7)
    assert keyed_hash("12345678901234567890", message, "sha1") == keyed_hash(
        RFC_SECRET, message, "sha1"
    )


def test_truncation_start_configured_and_dynamic() -> None:
    digest = bytes(range(20))  # last byte 0x13 -> dynamic offset 3
    assert truncation_start(digest, 0) == 0
    assert truncation_start(digest, 15) == 15
    assert truncation_start(digest, 16) == 3
    assert truncation_start(digest, 1000) == 3
    assert truncation_start(digest, -1) == 3
    assert truncation_start(digest, None) == 3


def test_truncation_start_clamped_for_short_digest() -> None:
    digest = bytes(15) + b"\x0f"  # 16 bytes, nibble 15 would overrun
    assert truncation_start(digest, None) == 12


def test_truncate_masks_sign_bit() -> None:
    assert truncate(b"\xff\xff\xff\xff", 0) == 0x7FFFFFFF
    assert truncate(b"\x00\x80\x00\x00\x01", 1) == 1
    assert truncate(bytes([0x12, 0x34, 0x56, 0x78]), 0) == 0x12345678


def test_fixed_offset_matches_dynamic_when_equal() -> None:
    digest = keyed_hash(RFC_SECRET, pack_factor(0), "sha1")
    dynamic = truncation_start(digest, None)
    assert truncate(digest, truncation_start(digest, 99)) == truncate(digest, dynamic)
    assert truncate(digest, truncation_start(digest, dynamic)) == truncate(digest, dynamic)


# ── derive_code ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("counter,expected", enumerate(RFC_HOTP_EXPECTED))
def test_derive_code_dynamic_offset_matches_rfc4226(counter: int, expected: str) -> None:
    assert derive_code(RFC_SECRET, counter, DYNAMIC) == expected


def test_derive_code_default_fixed_offset() -> None:
    # Bytes 15..18 of the counter-0 digest: 7f b7 cd e4 -> 2142752228
    assert derive_code(RFC_SECRET, 0, OTTConfig()) == "752228"


def test_derive_code_with_checksum() -> None:
    config = OTTConfig(truncation_offset=16, add_checksum=True)
    assert derive_code(RFC_SECRET, 0, config) == "7552243"


def test_derive_code_zero_padded() -> None:
    # RFC 6238: T=1111111109, X=30 -> counter 37037036, 8 digits "07081804"
    config = OTTConfig(truncation_offset=16, digits=8)
    assert derive_code(RFC_SECRET, 37037036, config) == "07081804"
    checked = OTTConfig(truncation_offset=16, digits=8, add_checksum=True)
    assert derive_code(RFC_SECRET, 37037036, checked) == "070818042"


@pytest.mark.parametrize("digits", range(1, 10))
@pytest.mark.parametrize("add_checksum", [False, True])
def test_derive_code_length(digits: int, add_checksum: bool) -> None:
    config = OTTConfig(digits=digits, add_checksum=add_checksum)
    for factor in range(50):
        code = derive_code(b"length-check", factor, config)
        assert len(code) == config.code_length
        assert code.isdigit()


def test_derive_code_clamps_out_of_range_digits() -> None:
    config = OTTConfig(digits=12)
    assert len(derive_code(RFC_SECRET, 0, config)) == 9


# ── RFC 6238 vectors through generate_code ───────────────────────────────────

_SHA256_SECRET = b"12345678901234567890123456789012"
_SHA512_SECRET = b"1234567890123456789012345678901234567890123456789012345678901234"

_TOTP_VECTORS = [
    (59, Algorithm.SHA1, RFC_SECRET, "94287082"),
    (59, Algorithm.SHA256, _SHA256_SECRET, "46119246"),
    (59, Algorithm.SHA512, _SHA512_SECRET, "90693936"),
    (1111111109, Algorithm.SHA1, RFC_SECRET, "07081804"),
    (1111111111, Algorithm.SHA256, _SHA256_SECRET, "67062674"),
    (20000000000, Algorithm.SHA512, _SHA512_SECRET, "47863826"),
]


@pytest.mark.parametrize("ts,alg,secret,expected", _TOTP_VECTORS)
def test_generate_code_dynamic_offset_rfc6238(
    ts: int, alg: Algorithm, secret: bytes, expected: str
) -> None:
    config = OTTConfig(algorithm=alg.value, expiration=30, digits=8, truncation_offset=1000)
    assert generate_code(secret, ts, config) == expected


# ── Validation ────────────────────────────────────────────────────────────────

def test_acceptable_codes_order() -> None:
    config = OTTConfig(truncation_offset=16)
    # T=400: current window 1, look-back window (400 - 150) // 300 = 0
    assert list(acceptable_codes(RFC_SECRET, 400, config)) == [
        RFC_HOTP_EXPECTED[1],
        RFC_HOTP_EXPECTED[0],
    ]


def test_validate_code_windows() -> None:
    config = OTTConfig(truncation_offset=16)
    assert validate_code("287082", RFC_SECRET, 400, config)
    assert validate_code(" 755224 ", RFC_SECRET, 400, config)
    # Past the midpoint the previous window is no longer accepted
    assert not validate_code("755224", RFC_SECRET, 500, config)
    # Never the next window
    assert not validate_code("359152", RFC_SECRET, 400, config)


def test_validate_code_rejects_garbage() -> None:
    config = OTTConfig()
    assert not validate_code("", RFC_SECRET, 0, config)
    assert not validate_code(None, RFC_SECRET, 0, config)
    assert not validate_code("75222８", RFC_SECRET, 0, config)
