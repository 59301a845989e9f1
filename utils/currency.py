from decimal import Decimal, InvalidOperation

from utils.errors import InvalidArgument

CENTS = Decimal("0.01")


def to_decimal(value, field: str = "amount") -> Decimal:
    """Coerce int/str/Decimal input to Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise InvalidArgument(f"{field} must be a number.")
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidArgument(f"{field} must be a number.") from None
    if not result.is_finite():
        raise InvalidArgument(f"{field} must be a finite number.")
    return result


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """Format a Decimal as currency string, e.g. '$1,234.56'."""
    return f"{symbol}{amount.quantize(CENTS):,}"


def format_signed(amount: Decimal, symbol: str = "$") -> str:
    """Format with +/- sign."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{symbol}{abs(amount).quantize(CENTS):,}"
