"""Input parsing and validation for ChilliLedger.

Raw values from forms and JSON bodies are parsed explicitly. A value that
is missing, non-numeric or out of range yields a failed Result naming the
problem; nothing is coerced to NaN or zero behind the caller's back.
"""
import math
import re
from datetime import date, datetime

from dateutil.parser import isoparse

from chilli_ledger.config import DEFAULT_INTEREST_RATE
from chilli_ledger.data_structures import CustomerInput, LoanInput, RecoveryInput, ChilliesInput, Settlement
from chilli_ledger.exceptions import ValidationError
from chilli_ledger.result import Result, ErrorType

# Largest value a SQLite INTEGER column can hold
MAX_INTEGER = 2 ** 63 - 1

FULL_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}($|[T ])")

FIELD_LABELS = {
    'name': "Name",
    'phone': "Phone",
    'address': "Address",
    'customer_id': "Customer",
    'amount': "Amount",
    'interest_rate': "Interest rate",
    'loan_date': "Loan date",
    'recovery_date': "Recovery date",
    'number_of_bags': "Number of bags",
    'weight_kg': "Weight",
    'market_rate': "Market rate",
    'transaction_date': "Transaction date",
}


def _label(field):
    return FIELD_LABELS.get(field, field.replace('_', ' ').capitalize())


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_number(value, field) -> Result:
    """Parse a finite number, without range checks."""
    if is_blank(value):
        return Result.fail(f"{_label(field)} is required", ErrorType.REQUIRED)
    # bool is an int subclass; True must not silently become 1
    if isinstance(value, bool):
        return Result.fail(f"{_label(field)} must be a number", ErrorType.NOT_A_NUMBER)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return Result.fail(f"{_label(field)} must be a number", ErrorType.NOT_A_NUMBER)
    else:
        return Result.fail(f"{_label(field)} must be a number", ErrorType.NOT_A_NUMBER)
    if math.isnan(number) or math.isinf(number):
        return Result.fail(f"{_label(field)} must be a number", ErrorType.NOT_A_NUMBER)
    return Result.ok(number)


def parse_positive_float(value, field) -> Result:
    result = _parse_number(value, field)
    if not result:
        return result
    if result.value <= 0:
        return Result.fail(f"{_label(field)} must be greater than 0", ErrorType.NOT_POSITIVE)
    return result


def parse_positive_int(value, field) -> Result:
    """Parse a strictly positive whole number that fits a SQLite INTEGER.

    Digit strings and ints are taken exactly; other numeric input ("3.0",
    4.0) must be integral. "2.5" is rejected, as is anything above MAX_INTEGER.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and value.strip().isdecimal():
        number = int(value.strip())
    else:
        result = _parse_number(value, field)
        if not result:
            return result
        if not result.value.is_integer():
            return Result.fail(f"{_label(field)} must be a whole number", ErrorType.NOT_AN_INTEGER)
        number = int(result.value)
    if number <= 0:
        return Result.fail(f"{_label(field)} must be greater than 0", ErrorType.NOT_POSITIVE)
    if number > MAX_INTEGER:
        return Result.fail(f"{_label(field)} is too large", ErrorType.OUT_OF_RANGE)
    return Result.ok(number)


def parse_optional_float(value, field, default) -> Result:
    """Parse a non-negative number, falling back to default when absent."""
    if is_blank(value):
        return Result.ok(default)
    result = _parse_number(value, field)
    if not result:
        return result
    if result.value < 0:
        return Result.fail(f"{_label(field)} cannot be negative", ErrorType.NEGATIVE)
    return result


def parse_date(value, field) -> Result:
    """Parse an ISO 8601 date (or datetime) into a date."""
    if is_blank(value):
        return Result.fail(f"{_label(field)} is required", ErrorType.REQUIRED)
    if isinstance(value, datetime):
        return Result.ok(value.date())
    if isinstance(value, date):
        return Result.ok(value)
    if not isinstance(value, str):
        return Result.fail(f"{_label(field)} must be a date (YYYY-MM-DD)", ErrorType.INVALID_DATE)
    text = value.strip()
    # isoparse alone would accept "2025" or "2025-06"
    if not FULL_DATE.match(text):
        return Result.fail(f"{_label(field)} must be a date (YYYY-MM-DD)", ErrorType.INVALID_DATE)
    try:
        return Result.ok(isoparse(text).date())
    except (ValueError, OverflowError):
        return Result.fail(f"{_label(field)} must be a date (YYYY-MM-DD)", ErrorType.INVALID_DATE)


def _optional_text(value):
    if is_blank(value):
        return None
    return str(value).strip()


class _Collector:
    """Accumulates field results so every violation is reported at once."""

    def __init__(self):
        self.errors = {}
        self.values = {}

    def add(self, field, result):
        if result:
            self.values[field] = result.value
        else:
            self.errors[field] = result.error

    def raise_if_invalid(self):
        if self.errors:
            raise ValidationError(self.errors)


def validate_customer_payload(data) -> CustomerInput:
    name = data.get('name')
    if is_blank(name):
        raise ValidationError({'name': "Name is required"})
    if not isinstance(name, str):
        raise ValidationError({'name': "Name must be text"})
    return CustomerInput(name=name.strip(),
                         phone=_optional_text(data.get('phone')),
                         address=_optional_text(data.get('address')))


def validate_customer_updates(data) -> dict:
    """Validate a partial customer update; only provided fields are returned."""
    updates = {}
    if 'name' in data:
        updates['name'] = validate_customer_payload({'name': data['name']}).name
    for field in ('phone', 'address'):
        if field in data:
            updates[field] = _optional_text(data[field])
    return updates


def validate_loan_payload(data) -> LoanInput:
    c = _Collector()
    c.add('customer_id', parse_positive_int(data.get('customer_id'), 'customer_id'))
    c.add('amount', parse_positive_float(data.get('amount'), 'amount'))
    c.add('interest_rate', parse_optional_float(data.get('interest_rate'), 'interest_rate',
                                                DEFAULT_INTEREST_RATE))
    c.add('loan_date', parse_date(data.get('loan_date'), 'loan_date'))
    c.raise_if_invalid()
    return LoanInput(**c.values)


def validate_recovery_payload(data) -> RecoveryInput:
    c = _Collector()
    c.add('customer_id', parse_positive_int(data.get('customer_id'), 'customer_id'))
    c.add('amount', parse_positive_float(data.get('amount'), 'amount'))
    c.add('recovery_date', parse_date(data.get('recovery_date'), 'recovery_date'))
    c.raise_if_invalid()
    return RecoveryInput(**c.values)


def validate_chillies_payload(data, require_customer=True, require_date=True) -> ChilliesInput:
    """Validate a chillies trade.

    The preview form checks only the three numeric inputs, so customer and
    date can be made optional.
    """
    c = _Collector()
    if require_customer:
        c.add('customer_id', parse_positive_int(data.get('customer_id'), 'customer_id'))
    c.add('number_of_bags', parse_positive_int(data.get('number_of_bags'), 'number_of_bags'))
    c.add('weight_kg', parse_positive_float(data.get('weight_kg'), 'weight_kg'))
    c.add('market_rate', parse_positive_float(data.get('market_rate'), 'market_rate'))
    if require_date:
        c.add('transaction_date', parse_date(data.get('transaction_date'), 'transaction_date'))
    c.raise_if_invalid()
    return ChilliesInput(customer_id=c.values.get('customer_id'),
                         number_of_bags=c.values['number_of_bags'],
                         weight_kg=c.values['weight_kg'],
                         market_rate=c.values['market_rate'],
                         transaction_date=c.values.get('transaction_date'))


def check_settlement(settlement: Settlement) -> Settlement:
    """Reject a settlement whose figures cannot be stored.

    Each input can be finite while weight * rate is not, e.g. 1e308 kg, and
    the per-bag service charge must still fit a SQLite INTEGER bind.
    """
    if settlement.service_charge > MAX_INTEGER:
        raise ValidationError({'number_of_bags': "Number of bags is too large"})
    if all(math.isfinite(v) for v in (settlement.total_earnings, settlement.commission,
                                       settlement.service_charge, settlement.total_charges,
                                       settlement.net_amount)):
        return settlement
    message = "Weight times market rate is too large"
    raise ValidationError({'weight_kg': message, 'market_rate': message})
