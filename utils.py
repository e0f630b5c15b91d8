"""
utils.py
Ids, timestamps, dates, money formatting, validation and CSV exports.
"""

from __future__ import annotations

import base64
import uuid
from datetime import date, datetime, timezone

import pandas as pd


def generate_id() -> str:
    return uuid.uuid4().hex[:13]


def now_iso() -> str:
    """UTC timestamp in the same shape JavaScript's toISOString() produces."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_iso() -> str:
    return date.today().isoformat()


def parse_iso(d: str) -> date:
    # Accept both plain dates and full timestamps.
    return date.fromisoformat(d[:10])


def date_key(d: str) -> date:
    """Sort key for record dates; unparseable dates sort first."""
    try:
        return parse_iso(d)
    except (TypeError, ValueError):
        return date.min


def format_currency(amount: float) -> str:
    return f"৳{amount:,.0f}"


def _is_number(value) -> bool:
    try:
        float(value)
        return True
    except (TypeError, ValueError):
        return False


def _check_amount(label: str, value, errors: list[str]) -> None:
    if not _is_number(value):
        errors.append(f"{label} must be numeric.")
    elif float(value) < 0:
        errors.append(f"{label} cannot be negative.")


def _check_date(label: str, value: str, errors: list[str]) -> None:
    try:
        parse_iso(value)
    except (TypeError, ValueError):
        errors.append(f"{label} must be a valid ISO date (YYYY-MM-DD).")


def validate_member_inputs(name: str, phone: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Name is required.")
    if not phone.strip():
        errors.append("Phone is required.")
    return errors


def validate_puja_inputs(name: str, budget, puja_date: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Puja name is required.")
    _check_amount("Budget", budget, errors)
    _check_date("Date", puja_date, errors)
    return errors


def validate_contribution_inputs(member_id: str, puja_id: str, amount, paid_amount) -> list[str]:
    errors: list[str] = []
    if not member_id:
        errors.append("Select a member.")
    if not puja_id:
        errors.append("Select a puja.")
    _check_amount("Amount", amount, errors)
    _check_amount("Paid amount", paid_amount, errors)
    return errors


def validate_money_entry(description: str, amount, entry_date: str) -> list[str]:
    """Shared by other income and expenses."""
    errors: list[str] = []
    if not description.strip():
        errors.append("Description is required.")
    _check_amount("Amount", amount, errors)
    _check_date("Date", entry_date, errors)
    return errors


def validate_notice_inputs(title: str, notice_date: str) -> list[str]:
    errors: list[str] = []
    if not title.strip():
        errors.append("Title is required.")
    _check_date("Date", notice_date, errors)
    return errors


def photo_data_uri(content: bytes, mime: str | None) -> str:
    return f"data:{mime or 'image/png'};base64,{base64.b64encode(content).decode('ascii')}"


def records_to_csv_bytes(records, columns: list[str] | None = None) -> bytes:
    df = pd.DataFrame([r.to_dict() for r in records], columns=columns)
    return df.to_csv(index=False).encode("utf-8-sig")
