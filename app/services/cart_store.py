"""
Cart Store: the customer's line items plus the cart-wide ordering mode.

The cart lives in client-side storage (the signed session cookie in the
web app) under two keys, each holding a JSON string:

    cart      -> [line item, ...]
    cartMode  -> {"type": "regular"} | {"type": "special", "specialId": ..., "specialName": ...}

Every mutation is written back immediately.
"""
import json
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import List, Optional

from app.models.cart import CartMode, RegularMode, CartLineItem, find_matching_index
from app.utils.errors import NotFound
from app.utils.formatting import round2, format_currency

logger = logging.getLogger(__name__)

CART_KEY = 'cart'
CART_MODE_KEY = 'cartMode'
TAX_RATE = Decimal('0.08')


@dataclass
class CartSnapshot:
    items: List[CartLineItem] = field(default_factory=list)
    mode: Optional[CartMode] = None


class CartStorage:
    """Persists a CartSnapshot into a mutable mapping (session, dict, ...)"""

    def __init__(self, store):
        self.store = store

    def load(self):
        """Return the persisted snapshot, or None when there is no usable cart"""
        raw_items = self.store.get(CART_KEY)
        if raw_items is None:
            if self.store.get(CART_MODE_KEY) is not None:
                logger.info('Dropping persisted cart mode without cart items')
                self.store.pop(CART_MODE_KEY, None)
            return None

        try:
            items = [CartLineItem.from_dict(i) for i in json.loads(raw_items)]
        except (ValueError, KeyError, TypeError, ArithmeticError) as e:
            logger.warning('Discarding corrupt persisted cart: %s', e)
            self.clear()
            return None

        if not items:
            # A mode without items is not a valid state
            return CartSnapshot()

        raw_mode = self.store.get(CART_MODE_KEY)
        try:
            mode = CartMode.from_dict(json.loads(raw_mode)) if raw_mode is not None else None
        except (ValueError, KeyError, TypeError) as e:
            # Items are kept; the next add adopts its mode
            logger.warning('Discarding corrupt persisted cart mode: %s', e)
            self.store.pop(CART_MODE_KEY, None)
            mode = None

        return CartSnapshot(items=items, mode=mode)

    def save(self, snapshot):
        self.store[CART_KEY] = json.dumps([item.to_dict() for item in snapshot.items])
        if snapshot.mode is not None:
            self.store[CART_MODE_KEY] = json.dumps(snapshot.mode.to_dict())
        else:
            self.store.pop(CART_MODE_KEY, None)

    def clear(self):
        self.store.pop(CART_KEY, None)
        self.store.pop(CART_MODE_KEY, None)


def cart_subtotal(items):
    return sum((item.line_total for item in items), Decimal('0'))


def cart_tax(items, tax_exempt_type_id=None, tax_rate=TAX_RATE):
    """Tax on every item except the exempt type; unknown exempt type taxes everything"""
    taxable = Decimal('0')
    for item in items:
        if tax_exempt_type_id is None or item.product_type_id != tax_exempt_type_id:
            taxable += item.line_total * tax_rate
    return round2(taxable)


def conflict_message(current_mode, requested_mode):
    """Prompt shown before clearing a cart of another ordering mode"""
    if current_mode is None:
        return ''
    if isinstance(current_mode, RegularMode):
        return ('You currently have regular menu items in your cart. '
                f'Adding items from {requested_mode.describe()} will clear your cart.')
    if isinstance(requested_mode, RegularMode):
        return (f'You currently have items from {current_mode.describe()} in your cart. '
                'Adding regular menu items will clear your cart.')
    return (f'You currently have items from {current_mode.describe()} in your cart. '
            f'Adding items from {requested_mode.describe()} will clear your cart.')


class CartStore:
    """All reads and writes of the cart go through this object"""

    def __init__(self, storage, tax_exempt_type_id=None, tax_rate=TAX_RATE):
        self.storage = storage
        self.tax_exempt_type_id = tax_exempt_type_id
        self.tax_rate = tax_rate
        snapshot = storage.load() or CartSnapshot()
        self._items = snapshot.items
        self._mode = snapshot.mode

    @property
    def items(self):
        return list(self._items)

    @property
    def mode(self):
        return self._mode

    def is_empty(self):
        return not self._items

    def __len__(self):
        return len(self._items)

    def _persist(self):
        self.storage.save(CartSnapshot(items=list(self._items), mode=self._mode))

    def mode_accepts(self, requested_mode):
        if not self._items or self._mode is None:
            return True
        return self._mode.matches(requested_mode)

    def add_item(self, item, requested_mode):
        """
        Add a configured item under requested_mode.
        Returns False without touching the cart when the modes conflict.
        """
        if not self.mode_accepts(requested_mode):
            logger.warning('Cart mode conflict: cart=%s requested=%s',
                           self._mode.to_dict(), requested_mode.to_dict())
            return False

        if not self._items or self._mode is None:
            self._mode = requested_mode

        index = find_matching_index(self._items, item)
        if index >= 0:
            # Keep the stored configuration; only the quantity grows
            existing = self._items[index]
            self._items[index] = replace(existing, quantity=existing.quantity + item.quantity)
        else:
            self._items.append(item)
        self._persist()
        return True

    def _check_index(self, index):
        if not 0 <= index < len(self._items):
            raise NotFound(f'Cart item {index} not found')

    def remove_item(self, index):
        self._check_index(index)
        del self._items[index]
        if not self._items:
            self._mode = None
        self._persist()

    def update_quantity(self, index, quantity):
        if quantity <= 0:
            self.remove_item(index)
            return
        self._check_index(index)
        self._items[index] = replace(self._items[index], quantity=quantity)
        self._persist()

    def clear_cart(self):
        self._items = []
        self._mode = None
        self.storage.clear()

    def switch_mode(self, new_mode, initial_item=None):
        """Replace the whole cart in one step: new mode, and optionally its first item"""
        self._items = [initial_item] if initial_item is not None else []
        self._mode = new_mode
        self._persist()

    def conflict_message(self, requested_mode):
        return conflict_message(self._mode, requested_mode)

    @property
    def item_count(self):
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self):
        return cart_subtotal(self._items)

    @property
    def tax(self):
        return cart_tax(self._items, self.tax_exempt_type_id, self.tax_rate)

    @property
    def total(self):
        return self.subtotal + self.tax

    def to_dict(self):
        subtotal, tax = self.subtotal, self.tax
        return {
            'items': [
                {
                    'index': index,
                    **item.to_dict(),
                    'unitCost': str(item.effective_unit_cost),
                    'lineTotal': str(item.line_total),
                }
                for index, item in enumerate(self._items)
            ],
            'mode': self._mode.to_dict() if self._mode else None,
            'count': self.item_count,
            'subtotal': str(subtotal),
            'tax': str(tax),
            'total': str(subtotal + tax),
            'formatted': {
                'subtotal': format_currency(subtotal),
                'tax': format_currency(tax),
                'total': format_currency(subtotal + tax),
            },
        }
