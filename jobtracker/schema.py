from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from dateutil import parser as dateparser

JOB_BASE_URL = "https://www.upwork.com/jobs/"

REQUIRED_STR_FIELDS = ["title"]
OPTIONAL_STR_FIELDS = [
    "description",
    "hourlyBudgetText",
    "uid",
    "ciphertext",
]
TIMESTAMP_FIELDS = ["publishedOn", "createdOn"]


@dataclass(frozen=True)
class Budget:
    """Either a display text (hourly ranges) or a fixed amount with currency."""

    text: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: str = "USD"

    def display(self) -> str:
        if self.text:
            return self.text
        if self.amount is None:
            return "n/a"
        amount = f"{self.amount.normalize():f}"
        if self.currency.upper() == "USD":
            return f"{amount}$"
        return f"{amount} {self.currency.upper()}"


@dataclass(frozen=True)
class Listing:
    """A job posting as returned by the saved-search feed. Never mutated."""

    id: str
    title: str
    description: str
    published_at: datetime
    budget: Budget
    url_token: str

    def url(self, base_url: str = JOB_BASE_URL) -> str:
        return f"{base_url}{self.url_token}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "published_at": self.published_at.isoformat(),
            "budget": self.budget.display(),
            "url": self.url(),
        }


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC."""
    if not _is_non_empty_str(value):
        raise ValueError(f"Not a timestamp: {value!r}")
    dt = dateparser.isoparse(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _raw_timestamp(data: Dict[str, Any]) -> Any:
    for f in TIMESTAMP_FIELDS:
        if data.get(f):
            return data[f]
    return None


def _parse_budget(data: Dict[str, Any]) -> Budget:
    text = data.get("hourlyBudgetText")
    amount = data.get("amount")
    value = None
    currency = "USD"
    if isinstance(amount, dict):
        raw = amount.get("amount")
        code = amount.get("currencyCode")
        if _is_non_empty_str(code):
            currency = code.strip()
    else:
        raw = amount
    if raw is not None and not isinstance(raw, bool):
        try:
            value = Decimal(str(raw))
        except InvalidOperation:
            value = None
    return Budget(text=text if _is_non_empty_str(text) else None, amount=value, currency=currency)


def validate_record(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a raw feed record.
    Empty list means valid.
    """
    if not isinstance(data, dict):
        return [f"Record must be an object, got {type(data).__name__}"]

    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if not _is_non_empty_str(data.get("ciphertext")):
        errors.append("Missing required field: ciphertext")

    raw_ts = _raw_timestamp(data)
    if raw_ts is None:
        errors.append("Missing required field: publishedOn")
    else:
        try:
            parse_timestamp(raw_ts)
        except (ValueError, OverflowError):
            errors.append(f"Field 'publishedOn' is not an ISO-8601 timestamp: {raw_ts!r}")

    return errors


def listing_from_record(data: Dict[str, Any]) -> Listing:
    """Build a Listing from a raw feed record. Raises ValueError if invalid."""
    errors = validate_record(data)
    if errors:
        raise ValueError("; ".join(errors))

    ciphertext = data["ciphertext"].strip()
    uid = data.get("uid")
    return Listing(
        id=uid.strip() if _is_non_empty_str(uid) else ciphertext,
        title=data["title"],
        description=data.get("description") or "",
        published_at=parse_timestamp(_raw_timestamp(data)),
        budget=_parse_budget(data),
        url_token=ciphertext,
    )
