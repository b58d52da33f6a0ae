"""Luhn check digit validation for order numbers."""


def is_valid_luhn(number: str) -> bool:
    """Return True if ``number`` is a non-empty digit string passing the Luhn check.

    Any character outside ``0-9`` makes the number invalid.
    """
    if not number:
        return False

    total = 0
    for position, char in enumerate(reversed(number)):
        if char not in "0123456789":
            return False
        digit = ord(char) - ord("0")
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit

    return total % 10 == 0
