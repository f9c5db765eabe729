import secrets
import string
from datetime import date, datetime
from typing import Optional, Union

QUEUE_TYPE_PREFIXES = {"Emergency": "E", "WalkIn": "W"}


def next_sequence_number(prefix: str, last_number: Optional[str], width: int = 4, separator: str = "-") -> str:
    """Returns ``prefix`` followed by the next zero-padded sequence.

    ``last_number`` is the highest number already issued with the same prefix
    (e.g. ``BILL-20240101-0007``); a missing or unparsable one restarts at 1.
    """
    sequence = 1
    if last_number:
        tail = last_number[len(prefix):].lstrip(separator)
        if tail.isdigit():
            sequence = int(tail) + 1
    return f"{prefix}{separator}{sequence:0{width}d}" if separator else f"{prefix}{sequence:0{width}d}"


def dated_prefix(prefix: str, on: Union[date, datetime]) -> str:
    return f"{prefix}-{on:%Y%m%d}"


def queue_number_prefix(queue_type: str, on: Union[date, datetime]) -> str:
    return f"{QUEUE_TYPE_PREFIXES.get(queue_type, 'A')}{on:%Y%m%d}"


def generate_patient_code(existing_patients: int) -> str:
    return f"PT{existing_patients + 1:05d}"


def generate_payment_number(on: Union[date, datetime]) -> str:
    """Generates a payment number; payments are not sequenced per day."""
    alphabet = string.ascii_uppercase + string.digits
    suffix = ''.join(secrets.choice(alphabet) for _ in range(8))
    return f"{dated_prefix('PAY', on)}-{suffix}"
