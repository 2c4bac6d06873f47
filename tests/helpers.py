"""Sample catalog data and in-memory fakes shared by the tests"""
from decimal import Decimal
from unittest import mock

from app.models.cart import CartLineItem, Choice, RegularMode, SpecialMode
from app.models.product import Product
from app.services.cart_store import CartStore, CartStorage

BREAD_TYPE_ID = 1
PASTRY_TYPE_ID = 2
SPECIAL_TYPE_ID = 3

PRODUCT_TYPES = [
    {'id': BREAD_TYPE_ID, 'name': 'Bread'},
    {'id': PASTRY_TYPE_ID, 'name': 'Pastry'},
    {'id': SPECIAL_TYPE_ID, 'name': 'Special'},
    {'id': 4, 'name': 'Catering'},
]

SOURDOUGH = {
    'id': 1,
    'title': 'Sourdough Loaf',
    'price': 10,
    'typeId': BREAD_TYPE_ID,
    'product_sizes': [],
}

CAKE = {
    'id': 2,
    'title': 'Layer Cake',
    'price': 30,
    'typeId': PASTRY_TYPE_ID,
    'product_sizes': [
        {'id': 11, 'size': '6 inch', 'cost': 30},
        {'id': 12, 'size': '8 inch', 'cost': 40, 'special_cost': 38},
    ],
    'product_selection_values': {
        'Flavor': {
            '6 inch': [
                {'id': 101, 'value': 'Vanilla', 'cost': 0},
                {'id': 102, 'value': 'Chocolate', 'cost': 2},
            ],
            '8 inch': [
                {'id': 103, 'value': 'Vanilla', 'cost': 0},
            ],
        },
    },
    'product_add_on_values': {
        'Topping': {
            '6 inch': [
                {'id': 201, 'value': 'Sprinkles', 'cost': 1.5},
                {'id': 202, 'value': 'Berries', 'cost': 3},
            ],
        },
    },
}

CROISSANT = {
    'id': 3,
    'title': 'Croissant',
    'price': 4,
    'typeId': PASTRY_TYPE_ID,
}

PIE = {
    'id': 50,
    'title': 'Holiday Pie',
    'price': 25,
    'typeId': SPECIAL_TYPE_ID,
}

HOLIDAY_SPECIAL = {
    'id': 7,
    'name': 'Holiday Pies',
    'start': '2030-12-04T16:00:00Z',
    'end': '2030-12-05T19:00:00Z',
    'active': True,
    'products': [PIE],
}

EXPIRED_SPECIAL = {
    'id': 8,
    'name': 'Last Year',
    'start': '2020-12-04T16:00:00Z',
    'end': '2020-12-04T19:00:00Z',
    'active': False,
    'products': [],
}

REGULAR_TIMES = {
    '2030-05-04T10:00:00Z': {'amountLeft': 3, 'active': True},
    '2030-05-03T16:00:00Z': {'amountLeft': 5, 'active': True},
    '2030-05-03T09:00:00Z': {'amountLeft': 0, 'active': False},
}

SPECIAL_TIMES = {
    '2030-12-04T17:00:00Z': {'amountLeft': 10, 'active': True},
}


def product(data):
    return Product.from_dict(data)


def line_item(product_id=1, quantity=1, unit_price='10', type_id=PASTRY_TYPE_ID, size_id=None,
              selections=None, add_ons=None, name='Item'):
    return CartLineItem(
        product_id=product_id,
        display_name=name,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        product_type_id=type_id,
        size_id=size_id,
        selections={k: Choice(v) if isinstance(v, str) else v for k, v in (selections or {}).items()},
        add_ons={k: [Choice(v) if isinstance(v, str) else v for v in values]
                 for k, values in (add_ons or {}).items()},
    )


def make_cart(store=None, tax_exempt_type_id=BREAD_TYPE_ID):
    return CartStore(CartStorage({} if store is None else store), tax_exempt_type_id=tax_exempt_type_id)


REGULAR = RegularMode()
HOLIDAY = SpecialMode(special_id=7, special_name='Holiday Pies')


def fake_api():
    """BakeryAPI stand-in answering with the sample catalog"""
    api = mock.Mock()
    api.fetch_product_types.return_value = PRODUCT_TYPES
    api.fetch_products.return_value = [SOURDOUGH, CAKE, CROISSANT, PIE]
    api.fetch_specials.return_value = [HOLIDAY_SPECIAL, EXPIRED_SPECIAL]
    api.get_regular_timeslots.return_value = dict(REGULAR_TIMES)
    api.get_special_timeslots.return_value = dict(SPECIAL_TIMES)
    api.create_payment_intent.return_value = {'id': 'pi_123', 'clientSecret': 'pi_123_secret'}
    api.process_order_and_pay.return_value = {'success': True}
    api.unsubscribe.return_value = {'success': True}
    return api


def fake_payments():
    payments = mock.Mock()
    payments.finalize_payment_method.return_value = 'pm_123'
    payments.client_config.return_value = {'publishableKey': 'pk_test_123'}
    return payments
