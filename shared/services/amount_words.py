"""Суммы в польском формате: «1 000,00 zł» и прописью («tysiąc»)."""

from decimal import Decimal, ROUND_HALF_UP
import re
from typing import Union

from core.config.settings import settings

Number = Union[int, float, Decimal]

UNITS = [
    "", "jeden", "dwa", "trzy", "cztery", "pięć", "sześć", "siedem", "osiem", "dziewięć",
]
TEENS = [
    "dziesięć", "jedenaście", "dwanaście", "trzynaście", "czternaście",
    "piętnaście", "szesnaście", "siedemnaście", "osiemnaście", "dziewiętnaście",
]
TENS = [
    "", "", "dwadzieścia", "trzydzieści", "czterdzieści",
    "pięćdziesiąt", "sześćdziesiąt", "siedemdziesiąt", "osiemdziesiąt", "dziewięćdziesiąt",
]
HUNDREDS = [
    "", "sto", "dwieście", "trzysta", "czterysta",
    "pięćset", "sześćset", "siedemset", "osiemset", "dziewięćset",
]
# (делитель, 1, 2-4, 5+)
ORDERS = [
    (10 ** 9, "miliard", "miliardy", "miliardów"),
    (10 ** 6, "milion", "miliony", "milionów"),
    (10 ** 3, "tysiąc", "tysiące", "tysięcy"),
]


def _plural_form(n: int, one: str, few: str, many: str) -> str:
    if n == 1:
        return one
    if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
        return few
    return many


def _below_thousand(n: int) -> str:
    hundreds, rest = divmod(n, 100)
    parts = [HUNDREDS[hundreds]]
    if 10 <= rest < 20:
        parts.append(TEENS[rest - 10])
    else:
        tens, units = divmod(rest, 10)
        parts.append(TENS[tens])
        parts.append(UNITS[units])
    return " ".join(p for p in parts if p)


def round_amount(value: Number) -> int:
    """Округление до целых злотых (половина вверх)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def number_to_words(value: Number) -> str:
    """Целая часть суммы прописью по-польски."""
    n = round_amount(value)
    if n == 0:
        return "zero"
    if n < 0:
        return f"minus {number_to_words(-n)}"

    words = []
    for divisor, one, few, many in ORDERS:
        if n >= divisor:
            high, n = divmod(n, divisor)
            # «tysiąc», а не «jeden tysiąc»
            prefix = "" if high == 1 else _below_thousand(high) if high < 1000 else number_to_words(high)
            words.append(f"{prefix} {_plural_form(high, one, few, many)}".strip())
    if n:
        words.append(_below_thousand(n))
    return " ".join(words)


def format_amount(value: Number) -> str:
    """Сумма с двумя знаками, пробелом между тысячами и запятой: «1 000,00 zł»."""
    amount = Decimal(str(value or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer, fraction = f"{abs(amount):.2f}".split(".")
    grouped = f"{int(integer):,}".replace(",", " ")
    return f"{sign}{grouped},{fraction} {settings.currency_suffix}"


def extract_number(text: str) -> float:
    """Достаёт число из отформатированной суммы («1 500,50 zł» → 1500.5)."""
    cleaned = re.sub(r"\s", "", text or "").replace(",", ".", 1)
    cleaned = re.sub(r"[^\d.]", "", cleaned)
    try:
        return float(cleaned) if cleaned else 0.0
    except ValueError:
        return 0.0
