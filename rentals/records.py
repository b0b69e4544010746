"""
Typed views of backend rows.

Rows coming back from a ``TableBackend`` are plain dicts; the views decode
them here once instead of passing untyped dicts around the templates.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from django.conf import settings
from django.utils.dateparse import parse_date, parse_datetime

from .backend import BackendError


class RecordError(BackendError):
    """A backend row is missing a column or holds an unusable value."""


def _required(row, key):
    try:
        value = row[key]
    except KeyError:
        raise RecordError(f"Row is missing column {key!r}") from None
    if value is None:
        raise RecordError(f"Column {key!r} is null")
    return value


def _decimal(value):
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise RecordError(f"Not a number: {value!r}") from None


def _date(value):
    if value is None or isinstance(value, date):
        return value.date() if isinstance(value, datetime) else value
    parsed = parse_date(str(value)[:10])
    if parsed is None:
        raise RecordError(f"Not a date: {value!r}")
    return parsed


def _datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    parsed = parse_datetime(str(value))
    if parsed is None:
        raise RecordError(f"Not a datetime: {value!r}")
    return parsed


@dataclass(frozen=True)
class PropertyRecord:
    id: int
    name: str
    address: str
    type: str = ""
    rooms: int = 0
    bathrooms: int = 0
    area: str = ""
    rent_amount: Decimal = Decimal("0")
    description: str = ""
    images: Tuple[str, ...] = field(default_factory=tuple)
    status: str = ""

    @classmethod
    def from_row(cls, row):
        return cls(
            id=_required(row, "id"),
            name=_required(row, "name"),
            address=row.get("address") or "",
            type=row.get("type") or "",
            rooms=int(row.get("rooms") or 0),
            bathrooms=int(row.get("bathrooms") or 0),
            area=row.get("area") or "",
            rent_amount=_decimal(row.get("rent_amount")) or Decimal("0"),
            description=row.get("description") or "",
            images=tuple(row.get("images") or ()),
            status=row.get("status") or "",
        )

    @property
    def cover_image(self):
        if self.images:
            return self.images[0]
        return settings.PLACEHOLDER_PROPERTY_IMAGE

    def initial(self):
        """Form initial values for editing this property."""
        return {
            "name": self.name,
            "address": self.address,
            "type": self.type,
            "rooms": self.rooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "rent_amount": self.rent_amount,
            "description": self.description,
            "status": self.status,
        }


@dataclass(frozen=True)
class TenantRecord:
    id: int
    first_name: str
    last_name: str
    email: str = ""
    phone: str = ""

    @classmethod
    def from_row(cls, row):
        return cls(
            id=_required(row, "id"),
            first_name=_required(row, "first_name"),
            last_name=_required(row, "last_name"),
            email=row.get("email") or "",
            phone=row.get("phone") or "",
        )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class LeaseRecord:
    id: int
    property_id: int
    tenant_id: int
    start_date: date
    end_date: date
    rent_amount: Optional[Decimal] = None
    deposit_amount: Optional[Decimal] = None
    status: str = ""
    property_record: Optional[PropertyRecord] = None
    tenant: Optional[TenantRecord] = None

    @classmethod
    def from_row(cls, row):
        embedded_property = row.get("property")
        embedded_tenant = row.get("tenant")
        return cls(
            id=_required(row, "id"),
            property_id=row.get("property_id"),
            tenant_id=row.get("tenant_id"),
            start_date=_date(_required(row, "start_date")),
            end_date=_date(row.get("end_date")),
            rent_amount=_decimal(row.get("rent_amount")),
            deposit_amount=_decimal(row.get("deposit_amount")),
            status=row.get("status") or "",
            property_record=PropertyRecord.from_row(embedded_property) if embedded_property else None,
            tenant=TenantRecord.from_row(embedded_tenant) if embedded_tenant else None,
        )

    @property
    def property_name(self):
        return self.property_record.name if self.property_record else ""


@dataclass(frozen=True)
class MaintenanceRecord:
    id: int
    property_id: int
    description: str
    priority: str = ""
    assigned_to: str = ""
    estimated_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    status: str = ""
    created_at: Optional[datetime] = None
    property_record: Optional[PropertyRecord] = None

    @classmethod
    def from_row(cls, row):
        embedded_property = row.get("property")
        return cls(
            id=_required(row, "id"),
            property_id=row.get("property_id"),
            description=_required(row, "description"),
            priority=row.get("priority") or "",
            assigned_to=row.get("assigned_to") or "",
            estimated_cost=_decimal(row.get("estimated_cost")),
            actual_cost=_decimal(row.get("actual_cost")),
            status=row.get("status") or "",
            created_at=_datetime(row.get("created_at")),
            property_record=PropertyRecord.from_row(embedded_property) if embedded_property else None,
        )

    @property
    def cost(self):
        """Actual cost when known, otherwise the estimate, otherwise zero."""
        return self.actual_cost or self.estimated_cost or Decimal("0")

    @property
    def property_name(self):
        return self.property_record.name if self.property_record else ""
