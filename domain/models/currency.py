from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from domain.exceptions.currency import InvalidInputError

RATE_PLACES = Decimal("0.000001")
# DECIMAL(19, 6) leaves 13 digits before the point
MAX_RATE = Decimal("9999999999999.999999")


def normalize_currency_code(code: str, field_name: str = "Currency") -> str:
    if not isinstance(code, str) or not code.strip():
        raise InvalidInputError(f"{field_name} cannot be null or empty")

    normalized = code.strip().upper()
    if len(normalized) != 3 or not (normalized.isascii() and normalized.isalpha()):
        raise InvalidInputError(f"{field_name} must be exactly 3 letters (ISO 4217), got {code!r}")
    return normalized


def validate_currency_pair(base: str, target: str) -> tuple[str, str]:
    """Normalize both codes and reject same-currency pairs."""
    base = normalize_currency_code(base, "Base currency")
    target = normalize_currency_code(target, "Target currency")
    if base == target:
        raise InvalidInputError("Base and target currencies must be different")
    return base, target


def quantize_rate(value: Decimal | str | int | float) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidInputError(f"Exchange rate {value!r} is not a number") from e
    if not amount.is_finite():
        raise InvalidInputError(f"Exchange rate {value!r} is not a finite number")
    return amount.quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Rate:
    base: str
    target: str
    value: Decimal
    provider_name: str
    observed_at: datetime

    def __post_init__(self):
        base, target = validate_currency_pair(self.base, self.target)
        value = quantize_rate(self.value)
        if value <= 0:
            raise InvalidInputError(f"Exchange rate must be positive, got {self.value}")
        if value > MAX_RATE:
            raise InvalidInputError(f"Exchange rate {self.value} exceeds DECIMAL(19,6)")
        if not self.provider_name:
            raise InvalidInputError("Rate provider name is required")

        observed_at = self.observed_at
        if observed_at.tzinfo is None:
            observed_at = observed_at.replace(tzinfo=UTC)

        object.__setattr__(self, "base", base)
        object.__setattr__(self, "target", target)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "observed_at", observed_at.astimezone(UTC))

    @property
    def pair(self) -> tuple[str, str]:
        return self.base, self.target

    def age_at(self, moment: datetime) -> float:
        """Seconds between observation and `moment`."""
        return (moment - self.observed_at).total_seconds()


@dataclass(frozen=True)
class SupportedCurrency:
    code: str
    name: str | None
