"""
Checkout state machine.

    SelectingTime -> CollectingPaymentAndContact -> Confirmed

Selecting a pickup slot creates a payment intent for the cart total;
submitting contact details with the payment form creates the payment
method and sends order + payment to the backend in a single request.
A failed attempt keeps the state, the slot, the contact details and the
cart so the customer can correct the payment details and resubmit.
Confirmed is terminal: its confirmation snapshot outlives the cart, which
is cleared only after the confirmation has been rendered.
"""
import json
import logging
from enum import Enum

from app.models.order import ContactInfo, OrderConfirmation, PickupTimeslot
from app.utils.errors import EmptyCartError, InvalidTransition, UpstreamError, ValidationError
from app.utils.formatting import to_minor_units
from app.utils.validators import validate_email, validate_phone

logger = logging.getLogger(__name__)

CHECKOUT_KEY = 'checkout'
CURRENCY = 'usd'


class CheckoutStep(Enum):
    SELECTING_TIME = 'time'
    COLLECTING_PAYMENT = 'payment'
    CONFIRMED = 'confirmation'


class CheckoutSession:

    def __init__(self, api, payments, step=CheckoutStep.SELECTING_TIME, timeslot=None,
                 payment_intent_id=None, client_secret=None, contact=None,
                 confirmation=None, cart_clear_pending=False):
        self.api = api
        self.payments = payments
        self.step = step
        self.timeslot = timeslot
        self.payment_intent_id = payment_intent_id
        self.client_secret = client_secret
        self.contact = contact or ContactInfo()
        self.confirmation = confirmation
        self.cart_clear_pending = cart_clear_pending

    @classmethod
    def start(cls, cart, api, payments):
        """Checkout can only be entered with something in the cart"""
        if cart.is_empty():
            raise EmptyCartError()
        # No checkout without a payment configuration
        payments.ensure_configured()
        logger.info('Checkout started for %d item(s)', cart.item_count)
        return cls(api, payments)

    def _require(self, step, action):
        if self.step is not step:
            raise InvalidTransition(f'Cannot {action} while checkout is at step "{self.step.value}"')

    def ensure_accessible(self, cart):
        """An empty cart only ends checkout before confirmation"""
        if self.step is not CheckoutStep.CONFIRMED and cart.is_empty():
            raise EmptyCartError()

    def select_timeslot(self, timeslot, cart):
        """SelectingTime -> CollectingPaymentAndContact"""
        self._require(CheckoutStep.SELECTING_TIME, 'select a pickup time')
        self.ensure_accessible(cart)
        self.payments.ensure_configured()

        intent = self.api.create_payment_intent(to_minor_units(cart.total))
        client_secret = intent.get('clientSecret')
        if not client_secret:
            raise UpstreamError('No client secret in response')
        if not intent.get('id'):
            raise UpstreamError('No payment intent ID in response')

        self.timeslot = timeslot
        self.payment_intent_id = intent['id']
        self.client_secret = client_secret
        self.step = CheckoutStep.COLLECTING_PAYMENT
        logger.info('Pickup time %s selected, payment intent %s', timeslot.timestamp, self.payment_intent_id)
        return intent

    def _validate_contact(self, contact):
        if not contact.is_complete():
            raise ValidationError('Please fill in all contact information')
        for valid, message in (validate_email(contact.email), validate_phone(contact.phone)):
            if not valid:
                raise ValidationError(message)

    def build_order(self, cart, contact):
        """Order body in the shape the backend's order endpoint expects"""
        return {
            'email': contact.email,
            'name': contact.name,
            'phone': contact.phone,
            'items': [item.to_order_item() for item in cart.items],
            'total': float(cart.total),
            'pickupTime': self.timeslot.timestamp,
            'notes': '',
            'status': 'pending',
        }

    def build_payment_intent_info(self, cart, contact, payment_method_id):
        return {
            'amount': to_minor_units(cart.total),
            'currency': CURRENCY,
            'orderId': None,
            'email': contact.email,
            'phone': contact.phone,
            'name': contact.name,
            'paymentInfo': {
                'intent': self.payment_intent_id,
                'payment_method': payment_method_id,
            },
        }

    def submit_payment(self, contact, payment_form, cart):
        """CollectingPaymentAndContact -> Confirmed"""
        self._require(CheckoutStep.COLLECTING_PAYMENT, 'submit payment')
        # Kept even if this attempt fails
        self.contact = contact
        self._validate_contact(contact)
        self.ensure_accessible(cart)

        payment_method_id = self.payments.finalize_payment_method(payment_form, contact)
        order = self.build_order(cart, contact)
        payment_intent_info = self.build_payment_intent_info(cart, contact, payment_method_id)
        try:
            self.api.process_order_and_pay(order, payment_intent_info)
        except UpstreamError as e:
            logger.warning('Order submission failed for intent %s: %s', self.payment_intent_id, e.message)
            raise

        self.confirmation = OrderConfirmation(
            customer_name=contact.name,
            customer_email=contact.email,
            customer_phone=contact.phone,
            timeslot=self.timeslot,
            items=cart.items,
            subtotal=cart.subtotal,
            tax=cart.tax,
            total=cart.total,
        )
        self.step = CheckoutStep.CONFIRMED
        self.cart_clear_pending = True
        logger.info('Order placed for pickup at %s, intent %s', self.timeslot.timestamp, self.payment_intent_id)
        return self.confirmation

    def complete(self, cart):
        """Clear the cart once the confirmation has been rendered"""
        if self.cart_clear_pending:
            cart.clear_cart()
            self.cart_clear_pending = False

    def to_dict(self):
        return {
            'step': self.step.value,
            'timeslot': self.timeslot.to_dict() if self.timeslot else None,
            'paymentIntentId': self.payment_intent_id,
            'clientSecret': self.client_secret,
            'contact': self.contact.to_dict(),
            'confirmation': self.confirmation.to_dict() if self.confirmation else None,
            'cartClearPending': self.cart_clear_pending,
        }

    @classmethod
    def from_dict(cls, data, api, payments):
        timeslot = data.get('timeslot')
        confirmation = data.get('confirmation')
        return cls(
            api,
            payments,
            step=CheckoutStep(data['step']),
            timeslot=PickupTimeslot.from_dict(timeslot) if timeslot else None,
            payment_intent_id=data.get('paymentIntentId'),
            client_secret=data.get('clientSecret'),
            contact=ContactInfo.from_dict(data.get('contact')),
            confirmation=OrderConfirmation.from_dict(confirmation) if confirmation else None,
            cart_clear_pending=bool(data.get('cartClearPending')),
        )


def load_checkout(store, api, payments):
    """Checkout session saved in store, or None"""
    raw = store.get(CHECKOUT_KEY)
    if raw is None:
        return None
    try:
        return CheckoutSession.from_dict(json.loads(raw), api, payments)
    except (ValueError, KeyError, TypeError, ArithmeticError) as e:
        logger.warning('Discarding corrupt checkout state: %s', e)
        store.pop(CHECKOUT_KEY, None)
        return None


def save_checkout(store, checkout):
    store[CHECKOUT_KEY] = json.dumps(checkout.to_dict())


def discard_checkout(store):
    store.pop(CHECKOUT_KEY, None)
