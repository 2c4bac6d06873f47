import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from app.utils.formatting import to_decimal

logger = logging.getLogger(__name__)


class CartMode:
    """Ordering mode of the whole cart: the regular menu or one special"""

    @staticmethod
    def from_dict(data):
        if not isinstance(data, dict):
            raise ValueError(f'Invalid cart mode: {data!r}')
        if data.get('type') == 'regular':
            return RegularMode()
        if data.get('type') == 'special':
            return SpecialMode(special_id=int(data['specialId']), special_name=data.get('specialName', ''))
        raise ValueError(f'Unknown cart mode type: {data.get("type")!r}')


@dataclass(frozen=True)
class RegularMode(CartMode):

    def matches(self, other):
        return isinstance(other, RegularMode)

    def describe(self):
        return 'the Regular Menu'

    def to_dict(self):
        return {'type': 'regular'}


@dataclass(frozen=True)
class SpecialMode(CartMode):
    special_id: int
    special_name: str = ''

    def matches(self, other):
        # Name is display-only; identity is the special id
        return isinstance(other, SpecialMode) and other.special_id == self.special_id

    def describe(self):
        return f'"{self.special_name}"'

    def to_dict(self):
        return {'type': 'special', 'specialId': self.special_id, 'specialName': self.special_name}


@dataclass(frozen=True)
class Choice:
    """A chosen selection or add-on value with its surcharge"""
    value: str
    cost: Decimal = Decimal('0')

    @classmethod
    def from_dict(cls, data):
        return cls(value=data['value'], cost=to_decimal(data.get('cost')))

    def to_dict(self):
        return {'value': self.value, 'cost': str(self.cost)}


@dataclass
class CartLineItem:
    product_id: int
    display_name: str
    quantity: int
    unit_price: Decimal
    product_type_id: int
    size_id: Optional[int] = None
    selections: Dict[str, Choice] = field(default_factory=dict)
    add_ons: Dict[str, List[Choice]] = field(default_factory=dict)
    product_snapshot: Optional[dict] = None

    @property
    def effective_unit_cost(self):
        """Base price plus every selection and add-on surcharge, per unit"""
        cost = self.unit_price
        for choice in self.selections.values():
            cost += choice.cost
        for choices in self.add_ons.values():
            for choice in choices:
                cost += choice.cost
        return cost

    @property
    def line_total(self):
        return self.effective_unit_cost * self.quantity

    @classmethod
    def from_dict(cls, data):
        quantity = int(data['quantity'])
        if quantity < 1:
            raise ValueError(f'Invalid quantity {quantity} for product {data.get("productId")}')
        size_id = data.get('product_size_id')
        return cls(
            product_id=int(data['productId']),
            display_name=data.get('product_name', ''),
            quantity=quantity,
            unit_price=to_decimal(data.get('price')),
            product_type_id=int(data.get('typeId') or 0),
            size_id=int(size_id) if size_id is not None else None,
            selections={k: Choice.from_dict(v) for k, v in (data.get('selections') or {}).items()},
            add_ons={k: [Choice.from_dict(v) for v in values] for k, values in (data.get('add_ons') or {}).items()},
            product_snapshot=data.get('product'),
        )

    def to_dict(self):
        return {
            'productId': self.product_id,
            'product_name': self.display_name,
            'quantity': self.quantity,
            'price': str(self.unit_price),
            'product_size_id': self.size_id,
            'selections': {k: v.to_dict() for k, v in self.selections.items()},
            'add_ons': {k: [v.to_dict() for v in values] for k, values in self.add_ons.items()},
            'typeId': self.product_type_id,
            'product': self.product_snapshot,
        }

    def to_order_item(self):
        """Line item as the backend's order endpoint expects it"""
        return {
            'productId': self.product_id,
            'quantity': self.quantity,
            'price': float(self.unit_price),
            'product_size_id': self.size_id,
            'selections': {k: {'value': v.value, 'cost': float(v.cost)} for k, v in self.selections.items()},
            'add_ons': {k: [{'value': v.value, 'cost': float(v.cost)} for v in values]
                        for k, values in self.add_ons.items()},
        }


def _price_key(price):
    # 10, 10.0 and 10.00 must produce the same key
    return format(to_decimal(price).normalize(), 'f')


def composite_key(item):
    """
    Identity of a configured line item. Items with the same key are the
    same purchasable configuration and merge instead of duplicating.
    """
    try:
        entry = {
            'productId': item.product_id,
            'price': _price_key(item.unit_price),
            'product_size_id': item.size_id or None,
        }
        if item.selections:
            entry['selections'] = sorted(f'{key}: {choice.value}' for key, choice in item.selections.items())
        if item.add_ons:
            add_ons = []
            for key, choices in item.add_ons.items():
                # Category keys may carry a "-<size>" suffix
                category = key.split('-')[0]
                add_ons.extend(f'{category}: {choice.value}' for choice in choices if choice.value)
            entry['add_ons'] = sorted(add_ons)
        return json.dumps(entry)
    except (TypeError, ValueError, AttributeError, ArithmeticError) as e:
        logger.warning('Falling back to degraded cart key for product %s: %s',
                       getattr(item, 'product_id', None), e)
        return json.dumps({
            'productId': getattr(item, 'product_id', None),
            'product_size_id': getattr(item, 'size_id', None) or None,
        }, default=str)


def find_matching_index(items, new_item):
    """Index of the line item sharing new_item's composite key, or -1"""
    new_key = composite_key(new_item)
    for index, item in enumerate(items):
        if composite_key(item) == new_key:
            return index
    return -1
