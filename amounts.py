from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


def to_cents(amount: Decimal, *, allow_negative: bool = False) -> int:
    try:
        quantized = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError("Invalid amount") from exc
    cents = int(quantized * 100)
    if cents < 0 and not allow_negative:
        raise ValueError("Amount must be positive")
    return cents


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_amount(cents: int, currency: str = "") -> str:
    text = f"{from_cents(cents):,.2f}"
    return f"{currency} {text}".strip()


def percent_used(spent_cents: int, limit_cents: int) -> Decimal:
    """Share of the limit that has been spent, as a percentage with one decimal."""
    if limit_cents <= 0:
        return Decimal("0.0") if spent_cents <= 0 else Decimal("100.0")
    ratio = Decimal(spent_cents) * 100 / Decimal(limit_cents)
    return ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
