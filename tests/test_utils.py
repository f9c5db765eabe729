import re
from datetime import date, datetime, timedelta

import pytest
from jose import JWTError

from app.models.staff_model import Staff
from app.utils import auth
from app.utils.generators import (
    dated_prefix,
    generate_patient_code,
    generate_payment_number,
    next_sequence_number,
    queue_number_prefix,
)
from app.utils.helpers import add_months, total_pages, utcnow
from app.utils.security import get_password_hash, verify_password


# --- Number generators ---

def test_next_sequence_number_starts_at_one():
    assert next_sequence_number("BILL-20240115", None) == "BILL-20240115-0001"


def test_next_sequence_number_increments_last_issued():
    assert next_sequence_number("BILL-20240115", "BILL-20240115-0007") == "BILL-20240115-0008"
    assert next_sequence_number("RX-20240115", "RX-20240115-0099") == "RX-20240115-0100"


def test_next_sequence_number_restarts_on_garbage():
    assert next_sequence_number("REC-20240115", "REC-20240115-abc") == "REC-20240115-0001"


def test_queue_numbers_have_no_separator():
    prefix = queue_number_prefix("WalkIn", date(2024, 1, 15))
    assert prefix == "W20240115"
    assert next_sequence_number(prefix, None, width=3, separator="") == "W20240115001"
    assert next_sequence_number(prefix, "W20240115041", width=3, separator="") == "W20240115042"


def test_queue_number_prefix_by_type():
    on = date(2024, 1, 15)
    assert queue_number_prefix("Emergency", on) == "E20240115"
    assert queue_number_prefix("Appointment", on) == "A20240115"


def test_dated_prefix():
    assert dated_prefix("INV", datetime(2024, 3, 9, 17, 45)) == "INV-20240309"


def test_generate_patient_code():
    assert generate_patient_code(0) == "PT00001"
    assert generate_patient_code(41) == "PT00042"


def test_generate_payment_number():
    number = generate_payment_number(datetime(2024, 1, 15))
    assert re.fullmatch(r"PAY-20240115-[A-Z0-9]{8}", number)
    assert generate_payment_number(datetime(2024, 1, 15)) != number


# --- Helpers ---

def test_add_months_clamps_day():
    assert add_months(datetime(2024, 1, 31, 9, 30), 1) == datetime(2024, 2, 29, 9, 30)
    assert add_months(datetime(2023, 12, 15), 1) == datetime(2024, 1, 15)
    assert add_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)


def test_total_pages():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def test_utcnow_is_naive():
    assert utcnow().tzinfo is None


# --- Security ---

def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_empty_and_malformed():
    assert not verify_password("", "hash")
    assert not verify_password("password", "")
    assert not verify_password("password", "not-a-bcrypt-hash")


def test_long_passwords_are_supported():
    password = "x" * 100
    hashed = get_password_hash(password)
    assert verify_password(password, hashed)
    assert not verify_password("x" * 99, hashed)


# --- JWT ---

def test_staff_claims_carry_clinic():
    staff = Staff(id=5, full_name="Dr. Who", email="who@example.com", role="Doctor")
    claims = auth.build_staff_claims(staff, clinic_id=3)
    assert claims["sub"] == "5"
    assert claims["role"] == "Doctor"
    assert claims["clinic_id"] == 3
    assert "clinic_id" not in auth.build_staff_claims(staff)


def test_access_token_roundtrip():
    token = auth.create_access_token({"sub": "5", "clinic_id": 3}, expires_delta=timedelta(minutes=5))
    assert token["expires_in"] == 300
    payload = auth.decode_access_token(token["access_token"])
    assert payload["sub"] == "5"
    assert payload["clinic_id"] == 3


def test_expired_token_is_rejected():
    token = auth.create_access_token({"sub": "5"}, expires_delta=timedelta(seconds=-1))
    with pytest.raises(JWTError):
        auth.decode_access_token(token["access_token"])
