"""
Payment provider side of checkout.

The hosted payment element tokenizes the card in the browser; the token
comes back with the contact form and is turned into a PaymentMethod here,
with the billing details collected by our own form. Only the publishable
key is used: the backend holds the secret key and confirms the payment.
"""
import logging

import stripe
from flask import current_app

from app.utils.errors import PaymentConfigurationError, PaymentDeclined, UpstreamError, ValidationError

logger = logging.getLogger(__name__)


class StripePayments:

    def __init__(self, publishable_key):
        self.publishable_key = publishable_key

    def ensure_configured(self):
        if not self.publishable_key:
            logger.error('STRIPE_PUBLISHABLE_KEY is not set; checkout is disabled')
            raise PaymentConfigurationError()

    def client_config(self):
        """What the browser needs to mount the payment element"""
        self.ensure_configured()
        return {'publishableKey': self.publishable_key}

    def finalize_payment_method(self, payment_form, contact):
        """Create the PaymentMethod for the submitted form; returns its id"""
        self.ensure_configured()
        token = (payment_form or {}).get('token')
        if not token:
            raise ValidationError('Please complete the payment form')

        try:
            payment_method = stripe.PaymentMethod.create(
                type='card',
                card={'token': token},
                billing_details={
                    'name': contact.name,
                    'email': contact.email,
                    'phone': contact.phone or None,
                },
                api_key=self.publishable_key,
            )
        except stripe.CardError as e:
            logger.warning('Card refused while creating payment method: %s', e.code)
            raise PaymentDeclined(e.user_message or 'Your card was declined') from e
        except stripe.StripeError as e:
            logger.warning('Stripe error while creating payment method: %s', e)
            raise UpstreamError(e.user_message or 'Failed to create payment method') from e

        return payment_method.id


def get_payments():
    payments = current_app.extensions.get('payments')
    if payments is None:
        payments = StripePayments(current_app.config.get('STRIPE_PUBLISHABLE_KEY'))
        current_app.extensions['payments'] = payments
    return payments
