"""Immutable, self-validating value objects.

Construction through ``create`` is the only validation point. Operations
that look like mutations return a new instance wrapped in a Result.
"""
from __future__ import annotations

import math
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, ClassVar

from .domain_errors import FieldError, InvalidOperationError, ValidationError
from .result import Result, err, ok

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_CENT = Decimal("0.01")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Email:
    value: str

    @classmethod
    def create(cls, email: Any) -> Result[Email, ValidationError]:
        normalized = email.strip().lower() if isinstance(email, str) else ""
        if not normalized:
            return err(ValidationError.single_field("email", "REQUIRED", "Email is required"))
        if not _EMAIL_RE.match(normalized):
            return err(ValidationError.single_field("email", "INVALID_FORMAT", "Invalid email format"))
        return ok(cls(normalized))

    @property
    def local_part(self) -> str:
        return self.value.split("@", 1)[0]

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]

    def equals(self, other: Email) -> bool:
        return self == other

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Amount rounded half-up to cents, tagged with an allow-listed currency."""

    amount: Decimal
    currency: str = "USD"

    VALID_CURRENCIES: ClassVar[frozenset[str]] = frozenset(
        {"USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY", "INR", "MXN", "BRL"}
    )

    @classmethod
    def _of(cls, amount: Decimal, currency: str) -> Money:
        return cls(amount.quantize(_CENT, rounding=ROUND_HALF_UP), currency.upper())

    @classmethod
    def create(cls, amount: Any, currency: str = "USD") -> Result[Money, ValidationError]:
        if not _is_number(amount) or (isinstance(amount, float) and not math.isfinite(amount)):
            return err(ValidationError.single_field("price", "INVALID_TYPE", "Price must be a number"))
        try:
            decimal_amount = Decimal(str(amount))
        except InvalidOperation:
            return err(ValidationError.single_field("price", "INVALID_TYPE", "Price must be a number"))
        if not decimal_amount.is_finite():
            return err(ValidationError.single_field("price", "INVALID_TYPE", "Price must be a number"))
        if decimal_amount < 0:
            return err(ValidationError.single_field("price", "NEGATIVE", "Price cannot be negative"))
        if not isinstance(currency, str) or currency.upper() not in cls.VALID_CURRENCIES:
            return err(
                ValidationError.single_field("currency", "INVALID", f"Invalid currency code: {currency}")
            )
        return ok(cls._of(decimal_amount, currency))

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        return cls._of(Decimal(0), currency)

    @property
    def value(self) -> Decimal:
        return self.amount

    def add(self, other: Money) -> Result[Money, ValidationError]:
        if self.currency != other.currency:
            return err(
                ValidationError.single_field(
                    "currency", "MISMATCH", f"Cannot add {self.currency} and {other.currency}"
                )
            )
        return ok(Money._of(self.amount + other.amount, self.currency))

    def subtract(self, other: Money) -> Result[Money, ValidationError]:
        if self.currency != other.currency:
            return err(
                ValidationError.single_field(
                    "currency", "MISMATCH", f"Cannot subtract {other.currency} from {self.currency}"
                )
            )
        remaining = self.amount - other.amount
        if remaining < 0:
            return err(
                ValidationError.single_field(
                    "price", "NEGATIVE_RESULT", "Subtraction would result in negative value"
                )
            )
        return ok(Money._of(remaining, self.currency))

    def multiply(self, factor: float | int | Decimal) -> Result[Money, ValidationError]:
        if not _is_number(factor) or not Decimal(str(factor)).is_finite():
            return err(ValidationError.single_field("factor", "INVALID_TYPE", "Factor must be a finite number"))
        if factor < 0:
            return err(ValidationError.single_field("factor", "NEGATIVE", "Cannot multiply by negative factor"))
        return ok(Money._of(self.amount * Decimal(str(factor)), self.currency))

    # Comparisons raise instead of returning a Result.
    def is_greater_than(self, other: Money) -> bool:
        self._ensure_same_currency(other)
        return self.amount > other.amount

    def is_less_than(self, other: Money) -> bool:
        self._ensure_same_currency(other)
        return self.amount < other.amount

    def _ensure_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValueError("Cannot compare different currencies")

    def is_zero(self) -> bool:
        return self.amount == 0

    def equals(self, other: Money) -> bool:
        return self == other

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"


@dataclass(frozen=True)
class Stock:
    quantity: int

    @classmethod
    def create(cls, quantity: Any) -> Result[Stock, ValidationError]:
        if not _is_number(quantity) or (isinstance(quantity, float) and math.isnan(quantity)):
            return err(ValidationError.single_field("stock", "INVALID_TYPE", "Stock must be a number"))
        if isinstance(quantity, float) and not quantity.is_integer():
            return err(ValidationError.single_field("stock", "NOT_INTEGER", "Stock must be a whole number"))
        if isinstance(quantity, Decimal) and quantity != quantity.to_integral_value():
            return err(ValidationError.single_field("stock", "NOT_INTEGER", "Stock must be a whole number"))
        if quantity < 0:
            return err(ValidationError.single_field("stock", "NEGATIVE", "Stock cannot be negative"))
        return ok(cls(int(quantity)))

    @classmethod
    def zero(cls) -> Stock:
        return cls(0)

    @property
    def value(self) -> int:
        return self.quantity

    def can_fulfill(self, requested: int) -> bool:
        return self.quantity >= requested

    def is_in_stock(self) -> bool:
        return self.quantity > 0

    def is_empty(self) -> bool:
        return self.quantity == 0

    def reduce(self, quantity: int) -> Result[Stock, InvalidOperationError]:
        if quantity < 0:
            return err(InvalidOperationError("Cannot reduce stock by negative amount"))
        if not self.can_fulfill(quantity):
            return err(InvalidOperationError.insufficient_stock(self.quantity, quantity))
        return ok(Stock(self.quantity - quantity))

    def increase(self, quantity: int) -> Result[Stock, ValidationError]:
        # Unlike reduce, a negative delta here is a validation failure.
        if quantity < 0:
            return err(
                ValidationError.single_field("quantity", "NEGATIVE", "Cannot increase stock by negative amount")
            )
        return ok(Stock(self.quantity + quantity))

    def equals(self, other: Stock) -> bool:
        return self == other

    def __str__(self) -> str:
        return f"{self.quantity} units"


@dataclass(frozen=True)
class Password:
    """Wraps a password hash. Plaintext never lives on this object."""

    hashed: str

    MIN_LENGTH: ClassVar[int] = 8
    MAX_LENGTH: ClassVar[int] = 128

    @classmethod
    def from_hash(cls, hashed: str) -> Password:
        return cls(hashed)

    @classmethod
    def validate_rules(cls, plaintext: Any) -> Result[None, ValidationError]:
        errors: list[FieldError] = []
        if not isinstance(plaintext, str) or not plaintext:
            errors.append(FieldError(field="password", code="REQUIRED", message="Password is required"))
        else:
            if len(plaintext) < cls.MIN_LENGTH:
                errors.append(
                    FieldError(
                        field="password",
                        code="TOO_SHORT",
                        message=f"Password must be at least {cls.MIN_LENGTH} characters",
                        constraints={"minLength": cls.MIN_LENGTH},
                    )
                )
            if len(plaintext) > cls.MAX_LENGTH:
                errors.append(
                    FieldError(
                        field="password",
                        code="TOO_LONG",
                        message=f"Password must be at most {cls.MAX_LENGTH} characters",
                        constraints={"maxLength": cls.MAX_LENGTH},
                    )
                )
        if errors:
            return err(ValidationError.from_field_errors(errors))
        return ok(None)

    @classmethod
    def validate_and_hash(
        cls,
        plaintext: str,
        hasher: Callable[[str], str],
    ) -> Result[Password, ValidationError]:
        checked = cls.validate_rules(plaintext)
        if not checked.ok:
            return checked
        return ok(cls(hasher(plaintext)))

    @classmethod
    async def validate_and_hash_async(
        cls,
        plaintext: str,
        hasher: Callable[[str], Awaitable[str]],
    ) -> Result[Password, ValidationError]:
        checked = cls.validate_rules(plaintext)
        if not checked.ok:
            return checked
        return ok(cls(await hasher(plaintext)))

    @property
    def value(self) -> str:
        return self.hashed

    def equals(self, other: Password) -> bool:
        return self == other
