from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from app.core.errors import ValidationError

PLACES = Decimal("0.0001")
# Largest value a Numeric(18, 4) column holds.
MAX_AMOUNT = Decimal("99999999999999.9999")


def round4(value) -> Decimal:
    # ROUND_HALF_UP on Decimal rounds halves away from zero.
    return Decimal(value).quantize(PLACES, rounding=ROUND_HALF_UP)


def to_decimal(value, message: str = "Invalid amount value") -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(message)
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, float):
        # repr keeps the shortest form, so 100.56785 stays 100.56785.
        parsed = Decimal(repr(value))
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError(message)
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            raise ValidationError(message) from None
    else:
        raise ValidationError(message)
    if not parsed.is_finite():
        raise ValidationError(message)
    return parsed


def parse_amount(value, message: str = "Invalid amount value") -> Decimal:
    parsed = to_decimal(value, message)
    if abs(parsed) > MAX_AMOUNT:
        raise ValidationError(message)
    return round4(parsed)
