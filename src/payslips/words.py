from __future__ import annotations

from typing import List

_ONES = (
    "",
    "One",
    "Two",
    "Three",
    "Four",
    "Five",
    "Six",
    "Seven",
    "Eight",
    "Nine",
    "Ten",
    "Eleven",
    "Twelve",
    "Thirteen",
    "Fourteen",
    "Fifteen",
    "Sixteen",
    "Seventeen",
    "Eighteen",
    "Nineteen",
)
_TENS = (
    "",
    "",
    "Twenty",
    "Thirty",
    "Forty",
    "Fifty",
    "Sixty",
    "Seventy",
    "Eighty",
    "Ninety",
)
_ORDERS = ("", "Thousand", "Million", "Billion", "Trillion")


def _convert_hundreds(number: int) -> str:
    if number < 20:
        return _ONES[number]
    if number < 100:
        tens, ones = divmod(number, 10)
        return _TENS[tens] if ones == 0 else f"{_TENS[tens]} {_ONES[ones]}"
    hundreds, remainder = divmod(number, 100)
    words = f"{_ONES[hundreds]} Hundred"
    if remainder:
        words += " " + _convert_hundreds(remainder)
    return words


def to_words(number: int) -> str:
    """Spell an integer in English title-case words, e.g. 1200 -> "One Thousand Two Hundred".

    Zero groups are skipped entirely, so 1_000_200 is "One Million Two Hundred".
    Currency text is left to the caller.
    """
    if isinstance(number, bool) or not isinstance(number, int):
        raise TypeError(f"to_words expects an int, got {type(number).__name__}")
    if number == 0:
        return "Zero"
    if number < 0:
        return "Minus " + to_words(abs(number))

    parts: List[str] = []
    order = 0
    while number > 0:
        if order >= len(_ORDERS):
            raise ValueError("Amounts of a thousand trillion or more are not supported")
        number, group = divmod(number, 1000)
        if group:
            words = _convert_hundreds(group)
            if _ORDERS[order]:
                words += " " + _ORDERS[order]
            parts.append(words)
        order += 1
    return " ".join(reversed(parts))
