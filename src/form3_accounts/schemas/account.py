"""
Account resource schemas and JSON:API envelopes.

Rules:
- ``to_dict()`` emits only populated fields; ``None`` never reaches the wire
- ``from_dict()`` ignores keys it does not know and raises ``KeyError``,
  ``TypeError`` or ``ValueError`` when the payload has the wrong shape
- Timestamps are ISO-8601 strings on the wire and ``datetime`` in Python
"""

import re
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Mapping

ACCOUNT_TYPE = "accounts"

# Fractional seconds directly before the UTC offset or the end of the string
_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:\d{2}$|$)")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp as returned by the API.

    Accepts the ``Z`` UTC designator and fractional seconds of any length,
    neither of which ``datetime.fromisoformat`` handles before Python 3.11.
    Fractions are padded or truncated to microseconds.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"Expected timestamp string, got {type(value).__name__}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], value)
    return datetime.fromisoformat(value)


def format_timestamp(value: datetime | None) -> str | None:
    """Format a timestamp for the wire."""
    if value is None:
        return None
    return value.isoformat()


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"Expected {what} object, got {type(value).__name__}")
    return value


def _optional_str_list(value: Any, key: str) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError(f"Expected list of strings for '{key}'")
    return list(value)


@dataclass
class AccountAttributes:
    """
    Banking attributes of an account.

    All fields are optional on the wire; the server decides which
    combinations are valid for a given country.
    """

    country: str | None = None
    base_currency: str | None = None
    account_number: str | None = None
    bank_id: str | None = None
    bank_id_code: str | None = None
    bic: str | None = None
    iban: str | None = None
    name: list[str] | None = None
    alternative_names: list[str] | None = None
    account_classification: str | None = None
    joint_account: bool | None = None
    account_matching_opt_out: bool | None = None
    secondary_identification: str | None = None
    switched: bool | None = None
    status: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to API JSON format."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[f.name] = list(value) if isinstance(value, list) else value
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "AccountAttributes":
        """Create from API response."""
        data = _require_mapping(data, "attributes")
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        for key in ("name", "alternative_names"):
            if key in values:
                values[key] = _optional_str_list(values[key], key)
        return cls(**values)


@dataclass
class Account:
    """A bank account registered with the API."""

    id: str
    organisation_id: str
    type: str = ACCOUNT_TYPE
    # Optimistic-concurrency token, assigned by the server (0 on creation)
    version: int | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None
    attributes: AccountAttributes | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to API JSON format."""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "organisation_id": self.organisation_id,
        }

        optional_fields = [
            ("version", self.version),
            ("created_on", format_timestamp(self.created_on)),
            ("modified_on", format_timestamp(self.modified_on)),
        ]
        for field_name, value in optional_fields:
            if value is not None:
                result[field_name] = value

        if self.attributes is not None:
            result["attributes"] = self.attributes.to_dict()

        return result

    @classmethod
    def from_dict(cls, data: Any) -> "Account":
        """Create from API response."""
        data = _require_mapping(data, "account")

        version = data.get("version")
        if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
            raise ValueError(f"Invalid account version: {version!r}")

        attributes = data.get("attributes")

        return cls(
            id=data["id"],
            organisation_id=data["organisation_id"],
            type=data.get("type", ACCOUNT_TYPE),
            version=version,
            created_on=parse_timestamp(data.get("created_on")),
            modified_on=parse_timestamp(data.get("modified_on")),
            attributes=AccountAttributes.from_dict(attributes) if attributes is not None else None,
        )


@dataclass
class Links:
    """Pagination links of a response envelope."""

    self_: str | None = None
    first: str | None = None
    last: str | None = None
    next: str | None = None
    prev: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Convert to API JSON format."""
        result = {
            "self": self.self_,
            "first": self.first,
            "last": self.last,
            "next": self.next,
            "prev": self.prev,
        }
        return {key: value for key, value in result.items() if value}

    @classmethod
    def from_dict(cls, data: Any) -> "Links":
        """Create from API response. A missing or null links object is empty."""
        if data is None:
            return cls()
        data = _require_mapping(data, "links")
        return cls(
            self_=data.get("self") or None,
            first=data.get("first") or None,
            last=data.get("last") or None,
            next=data.get("next") or None,
            prev=data.get("prev") or None,
        )


@dataclass
class AccountEnvelope:
    """Single-account envelope: ``{"data": {...}, "links": {...}}``."""

    data: Account
    links: Links = field(default_factory=Links)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"data": self.data.to_dict()}
        links = self.links.to_dict()
        if links:
            result["links"] = links
        return result

    @classmethod
    def from_dict(cls, payload: Any) -> "AccountEnvelope":
        payload = _require_mapping(payload, "envelope")
        return cls(
            data=Account.from_dict(payload["data"]),
            links=Links.from_dict(payload.get("links")),
        )


@dataclass
class AccountListEnvelope:
    """Account list envelope: ``{"data": [...], "links": {"next": ...}}``."""

    data: list[Account] = field(default_factory=list)
    links: Links = field(default_factory=Links)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"data": [account.to_dict() for account in self.data]}
        links = self.links.to_dict()
        if links:
            result["links"] = links
        return result

    @classmethod
    def from_dict(cls, payload: Any) -> "AccountListEnvelope":
        payload = _require_mapping(payload, "envelope")
        # An empty result set may come back as null instead of []
        items = payload.get("data") or []
        if not isinstance(items, list):
            raise TypeError(f"Expected list of accounts, got {type(items).__name__}")
        return cls(
            data=[Account.from_dict(item) for item in items],
            links=Links.from_dict(payload.get("links")),
        )
