# app/utils/ledger.py
"""
Savings ledger rules.

Everything here is pure: callers read the current balance and percentage from
the store, ask these functions to validate and compute, and persist the result
themselves. Amounts are handled as ``Decimal`` throughout.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.core.config import settings
from app.models.transaction import TransactionType, UnlockReason

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

UNLOCK_REASONS: List[Dict[str, str]] = [
    {"id": UnlockReason.emergency.value, "label": "Emergency expense", "description": "Unexpected medical bill, car repair, etc."},
    {"id": UnlockReason.education.value, "label": "Education", "description": "Books, courses, school fees"},
    {"id": UnlockReason.investment.value, "label": "Investment opportunity", "description": "Stocks, business, real estate"},
    {"id": UnlockReason.travel.value, "label": "Travel", "description": "Vacation or necessary travel"},
    {"id": UnlockReason.family.value, "label": "Family needs", "description": "Supporting family members"},
    {"id": UnlockReason.health.value, "label": "Health & Wellness", "description": "Gym membership, therapy, medical needs"},
    {"id": UnlockReason.goal.value, "label": "Specific goal purchase", "description": "Down payment, vehicle, equipment"},
    {"id": UnlockReason.other.value, "label": "Other reason", "description": "Please specify in notes"},
]


class LedgerValidationError(ValueError):
    """A request the ledger refuses before anything is written."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ────────────────────────────────────────────────────────────────────────────────
# HELPERS
# ────────────────────────────────────────────────────────────────────────────────
def to_decimal(value: Any) -> Decimal:
    """Convert user or database input to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        raise InvalidOperation("amount is required")
    return Decimal(str(value))


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Any) -> str:
    return f"${quantize(to_decimal(value)):.2f}"


def unlock_reasons() -> List[Dict[str, str]]:
    return [dict(r) for r in UNLOCK_REASONS]


def reason_label(reason: Any) -> str:
    reason_id = reason.value if isinstance(reason, UnlockReason) else str(reason)
    for r in UNLOCK_REASONS:
        if r["id"] == reason_id:
            return r["label"]
    return reason_id


def _positive_amount(value: Any) -> Optional[Decimal]:
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


# ────────────────────────────────────────────────────────────────────────────────
# PERCENT
# ────────────────────────────────────────────────────────────────────────────────
def validate_percent(percent: Any) -> int:
    """Return ``percent`` as an int, or raise if it is outside the allowed range."""
    low, high = settings.MIN_SAVINGS_PERCENT, settings.MAX_SAVINGS_PERCENT
    message = f"Savings percentage must be between {low} and {high}."
    if isinstance(percent, bool):
        raise LedgerValidationError(message)
    try:
        as_decimal = to_decimal(percent)
    except (InvalidOperation, ValueError, TypeError):
        raise LedgerValidationError(message)
    if not as_decimal.is_finite() or as_decimal != as_decimal.to_integral_value():
        raise LedgerValidationError(message)
    value = int(as_decimal)
    if value < low or value > high:
        raise LedgerValidationError(message)
    return value


# ────────────────────────────────────────────────────────────────────────────────
# ALLOWANCE
# ────────────────────────────────────────────────────────────────────────────────
def saved_portion(amount: Any, percent: int) -> Decimal:
    """The rounded amount a deposit locks into savings at ``percent``."""
    return quantize(to_decimal(amount) * Decimal(percent) / Decimal(100))


def preview_allowance(amount: Any, percent: int) -> Decimal:
    """Saved amount for a prospective deposit; 0.00 when the amount is not usable yet."""
    parsed = _positive_amount(amount)
    if parsed is None:
        return ZERO
    return saved_portion(parsed, percent)


def allowance_amount(amount: Any) -> Decimal:
    """The deposit as it is stored: positive and rounded to cents."""
    parsed = _positive_amount(amount)
    if parsed is None or quantize(parsed) <= 0:
        raise LedgerValidationError("Please enter a valid amount.")
    return quantize(parsed)


def apply_allowance(current_balance: Any, amount: Any, percent: Any) -> Tuple[Decimal, Decimal]:
    """
    Lock ``percent`` of ``amount`` into savings.

    The saved portion is rounded to cents *before* it is added, so repeated
    deposits accumulate rounded increments.

    Returns:
        (new_balance, saved_amount)
    """
    parsed = _positive_amount(amount)
    if parsed is None:
        raise LedgerValidationError("Please enter a valid amount.")
    pct = validate_percent(percent)
    saved = saved_portion(parsed, pct)
    return quantize(to_decimal(current_balance) + saved), saved


def allowance_message(amount: Any, saved_amount: Any, percent: int) -> str:
    return (
        f"✅ {format_money(amount)} added! "
        f"{format_money(saved_amount)} ({percent}%) saved automatically."
    )


# ────────────────────────────────────────────────────────────────────────────────
# UNLOCK
# ────────────────────────────────────────────────────────────────────────────────
def validate_unlock(current_balance: Any, amount: Any, reason: Any, notes: Optional[str]
                    ) -> Tuple[Decimal, UnlockReason, Optional[str]]:
    """
    Check an unlock request against the balance and the reason rules.

    Returns the parsed amount, the reason and the cleaned notes (stripped, or
    None when blank).
    """
    balance = to_decimal(current_balance)
    parsed = _positive_amount(amount)
    if parsed is None or parsed > balance:
        raise LedgerValidationError(f"Enter a valid amount up to {format_money(balance)}")

    if not reason:
        raise LedgerValidationError("Please select a reason for unlocking your savings")
    try:
        unlock_reason = UnlockReason(reason)
    except ValueError:
        raise LedgerValidationError("Please select a reason for unlocking your savings")

    cleaned = (notes or "").strip()
    if unlock_reason is UnlockReason.other and not cleaned:
        raise LedgerValidationError("Please provide details for your reason")

    return parsed, unlock_reason, cleaned or None


def apply_unlock(current_balance: Any, amount: Any, reason: Any, notes: Optional[str]) -> Decimal:
    """Return the balance left after releasing ``amount``."""
    parsed, _, _ = validate_unlock(current_balance, amount, reason, notes)
    return quantize(to_decimal(current_balance) - parsed)


def unlock_message(amount: Any, reason: Any) -> str:
    return f"Successfully unlocked {format_money(amount)} for {reason_label(reason)}"


# ────────────────────────────────────────────────────────────────────────────────
# FROM-SCRATCH BALANCE
# ────────────────────────────────────────────────────────────────────────────────
def transaction_delta(tx: Any, fallback_percent: int) -> Decimal:
    """
    Signed balance change of one transaction.

    Allowances use the amount recorded when they were deposited; rows written
    before that was recorded fall back to ``fallback_percent``.
    """
    tx_type = _field(tx, "type")
    tx_type = tx_type.value if isinstance(tx_type, TransactionType) else tx_type
    amount = to_decimal(_field(tx, "amount"))
    if tx_type == TransactionType.allowance.value:
        saved = _field(tx, "saved_amount")
        if saved is not None:
            return to_decimal(saved)
        pct = _field(tx, "savings_percent")
        return saved_portion(amount, pct if pct is not None else fallback_percent)
    if tx_type == TransactionType.unlock.value:
        return -amount
    return ZERO


def recompute_locked_amount(transactions: Iterable[Any], fallback_percent: Optional[int] = None) -> Decimal:
    if fallback_percent is None:
        fallback_percent = settings.DEFAULT_SAVINGS_PERCENT
    total = ZERO
    for tx in transactions:
        total += transaction_delta(tx, fallback_percent)
    return quantize(total)


def _field(tx: Any, name: str) -> Any:
    if isinstance(tx, dict):
        return tx.get(name)
    return getattr(tx, name, None)
