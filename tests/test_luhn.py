import random

import pytest

from loyaltyapi.utils.luhn import is_valid_luhn


def _with_check_digit(payload: str) -> str:
    """payload 뒤에 Luhn 검증 숫자를 붙여 반환"""
    total = 0
    for position, char in enumerate(reversed(payload)):
        digit = int(char)
        if position % 2 == 0:  # 검증 숫자가 붙으면 두 배 대상이 되는 자리
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return payload + str((10 - total % 10) % 10)


class TestLuhn:
    @pytest.mark.parametrize(
        "number",
        ["79927398713", "12345678903", "2377225624", "4561261212345467", "0", "18"],
    )
    def test_known_valid_numbers(self, number):
        assert is_valid_luhn(number) is True

    @pytest.mark.parametrize("number", ["79927398710", "12345678901", "1", "19"])
    def test_known_invalid_numbers(self, number):
        assert is_valid_luhn(number) is False

    @pytest.mark.parametrize(
        "number", ["", " ", "7992739871a", "7992-7398-713", " 79927398713", "٧٩"]
    )
    def test_empty_or_non_digit_is_invalid(self, number):
        assert is_valid_luhn(number) is False

    def test_constructed_numbers_are_valid_and_single_digit_changes_are_not(self):
        rng = random.Random(42)
        for _ in range(200):
            payload = "".join(rng.choice("0123456789") for _ in range(rng.randint(1, 18)))
            number = _with_check_digit(payload)
            assert is_valid_luhn(number), number

            index = rng.randrange(len(number))
            altered_digit = (int(number[index]) + rng.randint(1, 9)) % 10
            altered = number[:index] + str(altered_digit) + number[index + 1 :]
            assert not is_valid_luhn(altered), (number, altered)
