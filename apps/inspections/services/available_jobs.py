"""
Inspector-facing view of unassigned inspections.

Urgency is derived from the time left before the inspection and is never
stored: "now" moves between requests, so it is recomputed on every read.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

HIGH = "HIGH"
MEDIUM = "MEDIUM"
LOW = "LOW"
URGENCY_LEVELS = (HIGH, MEDIUM, LOW)

HIGH_WINDOW = timedelta(hours=24)
MEDIUM_WINDOW = timedelta(hours=72)


def compute_urgency(scheduled_at: datetime, now: datetime) -> str:
    """
    Classify how soon an inspection is due

    Args:
        scheduled_at: When the inspection takes place
        now: Reference time

    Returns:
        HIGH within 24 hours, MEDIUM within 72 hours, LOW otherwise
    """
    remaining = scheduled_at - now
    if remaining <= HIGH_WINDOW:
        return HIGH
    if remaining <= MEDIUM_WINDOW:
        return MEDIUM
    return LOW


@dataclass(frozen=True)
class PropertySummary:
    id: str
    title: str
    address: str
    city: str
    state: str
    type: str
    price: Decimal


@dataclass(frozen=True)
class Contact:
    id: str
    name: str
    email: str
    phone: Optional[str]

    @classmethod
    def from_user(cls, user) -> "Contact":
        return cls(id=str(user.id), name=user.name, email=user.email, phone=user.phone)


@dataclass(frozen=True)
class PaymentView:
    amount: int
    status: str  # PAID | PENDING


@dataclass(frozen=True)
class AvailableJob:
    id: str
    property: PropertySummary
    type: str
    scheduled_at: datetime
    status: str
    client: Optional[Contact]
    agent: Contact
    payment: PaymentView
    urgency: str
    duration: int
    notes: str

    def as_dict(self) -> dict:
        data = asdict(self)
        data["scheduledAt"] = data.pop("scheduled_at")
        return data


def project_available_job(inspection, now: datetime) -> AvailableJob:
    """
    Map an inspection (with listing, agent and clients loaded) onto the job view

    Only the first registered client is exposed, along with that client's notes.
    """
    listing = inspection.listing
    registrations = list(inspection.clients.all())
    first = registrations[0] if registrations else None

    return AvailableJob(
        id=str(inspection.id),
        property=PropertySummary(
            id=str(listing.id),
            title=listing.title,
            address=listing.address,
            city=listing.city,
            state=listing.state,
            type=listing.type,
            price=listing.price,
        ),
        type=inspection.type,
        scheduled_at=inspection.scheduled_at,
        status=inspection.status,
        client=Contact.from_user(first.client) if first else None,
        agent=Contact.from_user(listing.agent),
        payment=PaymentView(
            amount=inspection.fee or 0,
            status="PAID" if inspection.paid else "PENDING",
        ),
        urgency=compute_urgency(inspection.scheduled_at, now),
        duration=inspection.duration,
        notes=(first.notes if first else "") or "",
    )
