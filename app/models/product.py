"""
Catalog data as served by the bakery backend.
These objects are read-only snapshots; the backend owns the catalog.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from app.utils.formatting import to_decimal, parse_timestamp, format_special_date_range

# Label used in the selection/add-on maps when a product has no sizes
DEFAULT_SIZE_KEY = 'size'


@dataclass
class ProductType:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data):
        return cls(id=int(data['id']), name=data.get('name', ''))

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


@dataclass
class ProductSize:
    id: int
    size: str
    cost: Decimal
    special_cost: Optional[Decimal] = None
    product_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data):
        special_cost = data.get('special_cost')
        return cls(
            id=int(data['id']),
            size=data.get('size', ''),
            cost=to_decimal(data.get('cost')),
            special_cost=to_decimal(special_cost) if special_cost is not None else None,
            product_id=data.get('product_id'),
        )

    @property
    def effective_cost(self):
        """Size price, preferring the promotional cost when one is set"""
        return self.special_cost if self.special_cost is not None else self.cost

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'size': self.size,
            'cost': str(self.cost),
            'special_cost': str(self.special_cost) if self.special_cost is not None else None,
        }


@dataclass
class ProductOption:
    """One choosable value of a selection or add-on category"""
    id: int
    value: str
    cost: Decimal
    key_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=int(data['id']),
            value=data.get('value', ''),
            cost=to_decimal(data.get('cost')),
            key_id=data.get('key_id'),
        )

    def to_dict(self):
        return {'id': self.id, 'value': self.value, 'cost': str(self.cost), 'key_id': self.key_id}


def _parse_option_map(raw):
    # { category: { size_label: [option, ...] } }
    options = {}
    for category, by_size in (raw or {}).items():
        options[category] = {
            size_label: [ProductOption.from_dict(o) for o in values or []]
            for size_label, values in (by_size or {}).items()
        }
    return options


def _dump_option_map(options):
    return {
        category: {size_label: [o.to_dict() for o in values] for size_label, values in by_size.items()}
        for category, by_size in options.items()
    }


@dataclass
class Product:
    id: int
    title: str
    price: Decimal
    type_id: int
    description: str = ''
    special_price: Optional[Decimal] = None
    photo_url: Optional[str] = None
    quantity: Optional[int] = None
    active: bool = True
    sizes: List[ProductSize] = field(default_factory=list)
    selection_values: Dict[str, Dict[str, List[ProductOption]]] = field(default_factory=dict)
    add_on_values: Dict[str, Dict[str, List[ProductOption]]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data):
        special_price = data.get('special_price')
        return cls(
            id=int(data['id']),
            title=data.get('title', ''),
            price=to_decimal(data.get('price')),
            type_id=int(data.get('typeId') or 0),
            description=data.get('description') or '',
            special_price=to_decimal(special_price) if special_price is not None else None,
            photo_url=data.get('photoUrl'),
            quantity=data.get('quantity'),
            active=bool(data.get('active', True)),
            sizes=[ProductSize.from_dict(s) for s in data.get('product_sizes') or []],
            selection_values=_parse_option_map(data.get('product_selection_values')),
            add_on_values=_parse_option_map(data.get('product_add_on_values')),
        )

    @property
    def base_price(self):
        return self.special_price if self.special_price is not None else self.price

    @property
    def needs_configuration(self):
        """Products with sizes, selections or add-ons go through the configuration flow"""
        return bool(self.sizes or self.selection_values or self.add_on_values)

    def get_size(self, size_id):
        for size in self.sizes:
            if size.id == size_id:
                return size
        return None

    def snapshot(self):
        """Display-only subset stored alongside cart line items"""
        return {
            'id': self.id,
            'title': self.title,
            'photoUrl': self.photo_url,
            'product_sizes': [s.to_dict() for s in self.sizes],
        }

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'price': str(self.price),
            'special_price': str(self.special_price) if self.special_price is not None else None,
            'photoUrl': self.photo_url,
            'typeId': self.type_id,
            'quantity': self.quantity,
            'active': self.active,
            'product_sizes': [s.to_dict() for s in self.sizes],
            'product_selection_values': _dump_option_map(self.selection_values),
            'product_add_on_values': _dump_option_map(self.add_on_values),
            'needsConfiguration': self.needs_configuration,
        }


@dataclass
class Special:
    id: int
    name: str
    start: datetime
    end: datetime
    description: str = ''
    active: bool = False
    photo_url: Optional[str] = None
    products: List[Product] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=int(data['id']),
            name=data.get('name', ''),
            start=parse_timestamp(data['start']),
            end=parse_timestamp(data['end']),
            description=data.get('description') or '',
            active=bool(data.get('active', False)),
            photo_url=data.get('photoUrl'),
            products=[Product.from_dict(p) for p in data.get('products') or []],
        )

    def product_ids(self):
        return {p.id for p in self.products}

    def get_product(self, product_id):
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def is_available(self, now=None):
        """Active specials and upcoming ones (end still in the future) are orderable"""
        return self.active or self.end > (now or _now_for(self.end))

    def is_upcoming(self, now=None):
        return self.start > (now or _now_for(self.start))

    def to_dict(self, now=None):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'active': self.active,
            'photoUrl': self.photo_url,
            'upcoming': self.is_upcoming(now),
            'dateRange': format_special_date_range(self.start, self.end),
            'products': [p.to_dict() for p in self.products],
        }


def _now_for(reference):
    # Compare aware timestamps with aware now, naive with naive
    if reference.tzinfo is not None:
        return datetime.now(timezone.utc)
    return datetime.now()
