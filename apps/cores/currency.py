from decimal import Decimal, ROUND_HALF_UP

CURRENCY = "XAF"


def format_xaf(amount) -> str:
    """
    Format an amount as Central African CFA francs with no fractional digits.
    Example: 15000 -> '15 000 XAF'
    """
    if amount is None or amount == "":
        amount = 0
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    grouped = f"{int(value):,}".replace(",", " ")
    return f"{grouped} {CURRENCY}"
