from flask import g, session

from app.services.cart_store import CartStore, CartStorage
from app.services.catalog import get_catalog


def current_cart():
    """The cart of this browser, loaded from its session once per request"""
    if 'cart' not in g:
        g.cart = CartStore(CartStorage(session), tax_exempt_type_id=get_catalog().tax_exempt_type_id())
    return g.cart
