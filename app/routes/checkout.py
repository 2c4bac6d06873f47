from flask import Blueprint, request, jsonify, session, after_this_request

from app.models.order import ContactInfo
from app.services import current_cart
from app.services.bakery_api import get_bakery_api
from app.services.catalog import get_catalog
from app.services.checkout import CheckoutSession, load_checkout, save_checkout, discard_checkout
from app.services.payments import get_payments
from app.services.timeslots import available_timeslots, find_timeslot
from app.utils.errors import BakeryError, NotFound, UpstreamError, ValidationError
from app.utils.rate_limiter import single_flight

checkout_bp = Blueprint('checkout', __name__)


def _load_checkout():
    checkout = load_checkout(session, get_bakery_api(), get_payments())
    if checkout is None:
        raise NotFound('No checkout in progress')
    return checkout


def _state(checkout, cart):
    state = {'checkout': checkout.to_dict()}
    if not cart.is_empty():
        state['cart'] = cart.to_dict()
    return state


@checkout_bp.route('', methods=['POST'])
def start_checkout():
    """Start a new checkout for the current cart"""
    cart = current_cart()
    checkout = CheckoutSession.start(cart, get_bakery_api(), get_payments())
    save_checkout(session, checkout)
    return jsonify(_state(checkout, cart)), 201


@checkout_bp.route('', methods=['GET'])
def get_checkout():
    """Current checkout step; a confirmation stays visible after the cart is cleared"""
    cart = current_cart()
    checkout = _load_checkout()
    checkout.ensure_accessible(cart)
    if checkout.cart_clear_pending:
        checkout.complete(cart)
        save_checkout(session, checkout)
    return jsonify(_state(checkout, cart)), 200


@checkout_bp.route('', methods=['DELETE'])
def abandon_checkout():
    """Leave checkout; the cart is kept"""
    discard_checkout(session)
    return jsonify({'message': 'Checkout cancelled'}), 200


@checkout_bp.route('/timeslots', methods=['GET'])
def list_timeslots():
    """Pickup times available for the items in the cart"""
    cart = current_cart()
    _load_checkout().ensure_accessible(cart)

    try:
        result = available_timeslots(get_bakery_api(), get_catalog(), cart.items)
    except UpstreamError as e:
        raise type(e)('Failed to load available times') from e

    return jsonify({
        'specialsOnly': result['specialsOnly'],
        'timeslots': [slot.to_dict() for slot in result['timeslots']],
        'dates': [
            {'date': group['date'], 'slots': [slot.to_dict() for slot in group['slots']]}
            for group in result['dates']
        ]
    }), 200


@checkout_bp.route('/timeslot', methods=['POST'])
@single_flight('timeslot')
def select_timeslot():
    """Pick a pickup time and open the payment step"""
    data = request.get_json(silent=True) or {}
    timestamp = data.get('timestamp')
    if not timestamp:
        raise ValidationError('Please select a pickup time')

    cart = current_cart()
    checkout = _load_checkout()
    checkout.ensure_accessible(cart)

    timeslot = find_timeslot(get_bakery_api(), get_catalog(), cart.items, timestamp)
    if timeslot is None:
        raise ValidationError('That pickup time is no longer available')

    intent = checkout.select_timeslot(timeslot, cart)
    save_checkout(session, checkout)

    return jsonify({
        **_state(checkout, cart),
        'paymentIntentId': intent['id'],
        'clientSecret': intent['clientSecret'],
        'payment': get_payments().client_config()
    }), 200


@checkout_bp.route('/pay', methods=['POST'])
@single_flight('pay')
def pay():
    """Submit contact details and the payment form; places the order"""
    data = request.get_json(silent=True) or {}
    contact = ContactInfo.from_dict(data.get('contact'))

    cart = current_cart()
    checkout = _load_checkout()

    try:
        confirmation = checkout.submit_payment(contact, data.get('paymentForm'), cart)
    except BakeryError:
        # Keep the entered contact details for the retry
        save_checkout(session, checkout)
        raise
    save_checkout(session, checkout)

    @after_this_request
    def clear_cart_after_render(response):
        checkout.complete(cart)
        save_checkout(session, checkout)
        return response

    return jsonify({
        'message': 'Order placed successfully!',
        'confirmation': confirmation.to_dict(),
        'checkout': checkout.to_dict()
    }), 201
