import logging
import time

from flask import current_app

from app.models.cart import SpecialMode
from app.models.product import Product, ProductType, Special
from app.services.bakery_api import get_bakery_api
from app.utils.errors import BakeryError, NotFound, UpstreamError

logger = logging.getLogger(__name__)

SPECIAL_TYPE_NAME = 'Special'
CATERING_TYPE_NAME = 'Catering'
TAX_EXEMPT_TYPE_NAME = 'Bread'
# "Superbowl Special" products never show on the regular menu
LEGACY_EXCLUDED_TYPE_IDS = {10}
# Seconds a failed taxonomy fetch is remembered before the backend is asked again
TYPES_RETRY_SECONDS = 30


class Catalog:
    """Read-only view of the backend catalog"""

    def __init__(self, api, clock=time.monotonic):
        self.api = api
        self.clock = clock
        self._product_types = None
        self._types_error = None
        self._types_failed_at = None

    def product_types(self):
        """
        Product taxonomy; cached after the first successful fetch.
        A failure is remembered for TYPES_RETRY_SECONDS so a backend outage
        does not cost every request a full timeout.
        """
        if self._product_types is not None:
            return self._product_types
        if self._types_failed_at is not None and self.clock() - self._types_failed_at < TYPES_RETRY_SECONDS:
            raise type(self._types_error)(self._types_error.message)

        try:
            self._product_types = _parse(ProductType, self.api.fetch_product_types(), 'product types')
        except UpstreamError as e:
            self._types_error = e
            self._types_failed_at = self.clock()
            raise
        self._types_failed_at = None
        return self._product_types

    def type_id(self, name):
        for product_type in self.product_types():
            if product_type.name == name:
                return product_type.id
        return None

    def tax_exempt_type_id(self):
        """
        Id of the Bread type, or None when the taxonomy cannot be loaded.
        None means every item is taxed.
        """
        try:
            return self.type_id(TAX_EXEMPT_TYPE_NAME)
        except BakeryError as e:
            logger.warning('Product types unavailable, taxing all items: %s', e.message)
            return None

    def special_type_id(self):
        return self.type_id(SPECIAL_TYPE_NAME)

    def products(self, include_sold_out=False):
        return _parse(Product, self.api.fetch_products(include_sold_out=include_sold_out), 'products')

    def regular_menu(self, include_sold_out=False):
        """Products orderable from the regular menu"""
        excluded = set(LEGACY_EXCLUDED_TYPE_IDS)
        for name in (SPECIAL_TYPE_NAME, CATERING_TYPE_NAME):
            excluded_id = self.type_id(name)
            if excluded_id is not None:
                excluded.add(excluded_id)

        return [p for p in self.products(include_sold_out) if p.type_id not in excluded]

    def categories(self, products):
        """Distinct product types present in products, in first-seen order"""
        names = {t.id: t.name for t in self.product_types()}
        seen = []
        for product in products:
            if product.type_id not in seen:
                seen.append(product.type_id)
        return [{'id': type_id, 'name': names.get(type_id, f'Category {type_id}')} for type_id in seen]

    def specials(self):
        return _parse(Special, self.api.fetch_specials(), 'specials')

    def available_specials(self, now=None):
        return [s for s in self.specials() if s.is_available(now)]

    def get_special(self, special_id):
        for special in self.specials():
            if special.id == special_id:
                return special
        raise NotFound(f'Special {special_id} not found')

    def find_product(self, product_id, mode):
        """Look a product up in the catalog the given cart mode orders from"""
        if isinstance(mode, SpecialMode):
            product = self.get_special(mode.special_id).get_product(product_id)
        else:
            product = next((p for p in self.products() if p.id == product_id), None)
        if product is None:
            raise NotFound(f'Product {product_id} not found')
        return product


def _parse(model, payload, what):
    """Build model objects from a backend list; a malformed payload is an upstream failure"""
    try:
        return [model.from_dict(entry) for entry in payload]
    except (KeyError, TypeError, ValueError, AttributeError, ArithmeticError) as e:
        logger.warning('Malformed %s payload from backend: %r', what, e)
        raise UpstreamError(f'Failed to load {what}') from e


def get_catalog():
    catalog = current_app.extensions.get('catalog')
    if catalog is None:
        catalog = Catalog(get_bakery_api())
        current_app.extensions['catalog'] = catalog
    return catalog
