from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from app.models.cart import CartLineItem
from app.utils.formatting import to_decimal, parse_timestamp, format_currency, format_datetime


@dataclass
class PickupTimeslot:
    """A pickup slot offered by the backend; read-only"""
    timestamp: str
    amount_left: int = 0
    active: bool = True

    @property
    def starts_at(self):
        return parse_timestamp(self.timestamp)

    @classmethod
    def from_dict(cls, data):
        return cls(
            timestamp=data['timestamp'],
            amount_left=int(data.get('amountLeft') or 0),
            active=bool(data.get('active', True)),
        )

    def to_dict(self):
        return {
            'id': self.timestamp,
            'timestamp': self.timestamp,
            'amountLeft': self.amount_left,
            'active': self.active,
            'label': format_datetime(self.timestamp),
        }


@dataclass
class ContactInfo:
    name: str = ''
    email: str = ''
    phone: str = ''

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            data = {}
        return cls(
            name=(data.get('name') or '').strip(),
            email=(data.get('email') or '').strip(),
            phone=(data.get('phone') or '').strip(),
        )

    def is_complete(self):
        return bool(self.name and self.email and self.phone)

    def to_dict(self):
        return {'name': self.name, 'email': self.email, 'phone': self.phone}


@dataclass
class OrderConfirmation:
    """What the confirmation view shows; independent of the live cart"""
    customer_name: str
    customer_email: str
    customer_phone: str
    timeslot: PickupTimeslot
    items: List[CartLineItem]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    confirmed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_dict(cls, data):
        return cls(
            customer_name=data['customerName'],
            customer_email=data['customerEmail'],
            customer_phone=data['customerPhone'],
            timeslot=PickupTimeslot.from_dict(data['timeslot']),
            items=[CartLineItem.from_dict(i) for i in data.get('items', [])],
            subtotal=to_decimal(data['subtotal']),
            tax=to_decimal(data['tax']),
            total=to_decimal(data['total']),
            confirmed_at=data.get('confirmedAt') or '',
        )

    def to_dict(self):
        return {
            'customerName': self.customer_name,
            'customerEmail': self.customer_email,
            'customerPhone': self.customer_phone,
            'timeslot': self.timeslot.to_dict(),
            'pickupTime': format_datetime(self.timeslot.timestamp),
            'items': [item.to_dict() for item in self.items],
            'subtotal': str(self.subtotal),
            'tax': str(self.tax),
            'total': str(self.total),
            'formatted': {
                'subtotal': format_currency(self.subtotal),
                'tax': format_currency(self.tax),
                'total': format_currency(self.total),
            },
            'confirmedAt': self.confirmed_at,
        }
