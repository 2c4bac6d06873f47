from app.models.product import Product, ProductSize, ProductOption, ProductType, Special
from app.models.cart import CartMode, RegularMode, SpecialMode, Choice, CartLineItem, composite_key
from app.models.order import PickupTimeslot, ContactInfo, OrderConfirmation

__all__ = ['Product', 'ProductSize', 'ProductOption', 'ProductType', 'Special',
           'CartMode', 'RegularMode', 'SpecialMode', 'Choice', 'CartLineItem', 'composite_key',
           'PickupTimeslot', 'ContactInfo', 'OrderConfirmation']
