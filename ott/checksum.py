"""
Luhn-style check digit for generated codes.
"""

# Digit sum of 2*d for d in 0..9
DOUBLE_DIGITS = (0, 2, 4, 6, 8, 1, 3, 5, 7, 9)


def calc_checksum(number: int, digits: int) -> int:
    """
    Compute the check digit of ``number``.

    Exactly ``digits`` positions are consumed, least-significant first, so
    leading zeros count. The first position is doubled, then every other one.

    Args:
        number: Non-negative code value.
        digits: How many decimal positions to consume.

    Returns:
        Check digit in 0..9.
    """
    double = True
    total = 0
    for _ in range(digits):
        number, digit = divmod(number, 10)
        if double:
            digit = DOUBLE_DIGITS[digit]
        total += digit
        double = not double
    return (10 - total % 10) % 10
