"""
Input Validation for ledger operations

DESIGN DECISION: Every check that can run without storage runs first,
in a fixed order:

1. AMOUNT - numeric, then non-zero, then non-negative, then precision
2. DAY OF WEEK - integer in 1..7 (allowances only)
3. NAME - non-empty (child creation only)

Checks that need storage (child existence, balance sufficiency) are
done by the services afterwards. The order is observable: a zero
amount sent to an unknown child reports the amount, not the child.

IMPORTANT: Validation NEVER silently fixes issues.
An amount with too many decimals is rejected, not rounded.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from weekly_allowance.config import get_settings
from weekly_allowance.exceptions import (
    EmptyNameError,
    InvalidAmountError,
    InvalidDayOfWeekError,
)


class LedgerValidator:
    """
    Validates and normalises raw operation inputs.

    Amounts come back as Decimal quantized to the configured
    number of decimal places.
    """

    def __init__(self, decimal_places: Optional[int] = None):
        if decimal_places is None:
            decimal_places = get_settings().ledger.amount_decimal_places
        self._places = decimal_places
        self._quantum = Decimal(1).scaleb(-decimal_places)

    @property
    def decimal_places(self) -> int:
        return self._places

    def _to_decimal(self, amount: Any) -> Decimal:
        """
        Convert an incoming amount to Decimal.

        Floats go through str() so 123.45 becomes Decimal("123.45")
        rather than its binary approximation.
        """
        if isinstance(amount, bool):
            raise InvalidAmountError(InvalidAmountError.NOT_A_NUMBER, amount)
        if isinstance(amount, Decimal):
            value = amount
        elif isinstance(amount, (int, float, str)):
            try:
                value = Decimal(str(amount).strip())
            except InvalidOperation as e:
                raise InvalidAmountError(InvalidAmountError.NOT_A_NUMBER, amount) from e
        else:
            raise InvalidAmountError(InvalidAmountError.NOT_A_NUMBER, amount)

        if not value.is_finite():
            raise InvalidAmountError(InvalidAmountError.NOT_A_NUMBER, amount)
        return value

    def validate_amount(self, amount: Any) -> Decimal:
        """
        Validate a money amount.

        Raises:
            InvalidAmountError: "Amount must be greater than zero" for 0,
                "Amount cannot be negative" for values below 0.
                "Amount is too large" past the decimal context precision.
        """
        value = self._to_decimal(amount)

        if value == 0:
            raise InvalidAmountError(InvalidAmountError.ZERO, amount)
        if value < 0:
            raise InvalidAmountError(InvalidAmountError.NEGATIVE, amount)

        quantized = self._quantize(value, amount)
        if quantized != value:
            raise InvalidAmountError(
                f"Amount cannot have more than {self._places} decimal places",
                amount,
            )
        return quantized

    def validate_day_of_week(self, day: Any) -> int:
        """
        Validate an ISO weekday (1=Monday .. 7=Sunday).

        bool is rejected even though it is an int subclass.
        """
        if isinstance(day, bool) or not isinstance(day, int):
            raise InvalidDayOfWeekError(day)
        if not 1 <= day <= 7:
            raise InvalidDayOfWeekError(day)
        return int(day)

    def validate_child_name(self, name: Optional[str]) -> str:
        """Only the empty string (or None) is rejected; whitespace is kept."""
        if name is None or name == "":
            raise EmptyNameError()
        return name

    def normalize_balance(self, balance: Decimal) -> Decimal:
        """
        Quantize a computed balance to the ledger precision.

        Raises:
            InvalidAmountError: If the balance no longer fits the decimal context
        """
        return self._quantize(balance, balance)

    def _quantize(self, value: Decimal, amount: Any) -> Decimal:
        # quantize() signals InvalidOperation once the result needs more
        # digits than the context precision allows.
        try:
            return value.quantize(self._quantum)
        except InvalidOperation as e:
            raise InvalidAmountError(InvalidAmountError.TOO_LARGE, amount) from e
