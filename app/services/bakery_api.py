"""
Client for the bakery backend API.
The backend owns the catalog, pickup capacity, orders and payment confirmation.
"""
import logging

import requests
from flask import current_app

from app.utils.errors import NetworkError, UpstreamError, PaymentDeclined

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://frese-bakery-backend-app-504689514656.us-east1.run.app/api'

# Markers the backend/provider use for a refused card
DECLINE_CODES = {'card_declined', 'insufficient_funds', 'expired_card', 'incorrect_cvc',
                 'processing_error', 'authentication_required'}


class BakeryAPI:
    """Thin wrapper over the backend's REST endpoints"""

    def __init__(self, base_url=DEFAULT_API_URL, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method, path, default_error, **kwargs):
        url = f'{self.base_url}{path}'
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning('%s %s failed: %s', method, path, e)
            raise NetworkError(f'{default_error}: the bakery server could not be reached') from e

        if not response.ok:
            raise self._error_from_response(response, path, default_error)

        try:
            return response.json()
        except ValueError as e:
            logger.warning('%s %s returned invalid JSON', method, path)
            raise UpstreamError(default_error) from e

    def _error_from_response(self, response, path, default_error):
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        message = payload.get('error') or payload.get('message') or default_error
        if not isinstance(message, str):
            message = default_error
        logger.warning('Backend %s answered %s: %s', path, response.status_code, message)

        code = payload.get('decline_code') or payload.get('code')
        if response.status_code == 402 or code in DECLINE_CODES:
            return PaymentDeclined(message)
        return UpstreamError(message)

    def fetch_products(self, include_sold_out=False):
        """Active products with sizes, specials included; sold out items are filtered by default"""
        params = {'includeSoldOut': 'true'} if include_sold_out else None
        return self._request('GET', '/activeProductsAndSizesIncludingSpecials',
                             'Failed to fetch products', params=params)

    def fetch_product_types(self):
        return self._request('GET', '/products/types', 'Failed to fetch product types')

    def fetch_specials(self, active_only=True):
        params = {'activeOnly': 'true' if active_only else 'false'}
        return self._request('GET', '/activeSpecials', 'Failed to fetch specials', params=params)

    def create_payment_intent(self, amount):
        """amount is in cents; returns {'id': ..., 'clientSecret': ...}"""
        intent = self._request('POST', '/stripe/intent', 'Failed to create payment intent',
                               json={'amount': amount})
        # Stripe returns client_secret; normalise to clientSecret
        return {
            **intent,
            'clientSecret': intent.get('client_secret') or intent.get('clientSecret'),
        }

    def process_order_and_pay(self, order, payment_intent_info):
        """Create the order and confirm its payment in one request"""
        return self._request('POST', '/processOrderAndPay', 'Failed to process order',
                             json={'order': order, 'paymentIntentInfo': payment_intent_info})

    def get_regular_timeslots(self, days_out=6):
        return self._request('GET', f'/orders/availableTimes/{days_out}',
                             'Failed to fetch regular timeslots')

    def get_special_timeslots(self, special_id):
        return self._request('GET', f'/orders/availableSpecialTimes/{special_id}',
                             'Failed to fetch special timeslots')

    def unsubscribe(self, email):
        return self._request('POST', '/unsubscribe', 'Failed to unsubscribe', json={'email': email})


def get_bakery_api():
    """Backend client bound to the current app"""
    api = current_app.extensions.get('bakery_api')
    if api is None:
        api = BakeryAPI(
            base_url=current_app.config['BAKERY_API_URL'],
            timeout=current_app.config['BAKERY_API_TIMEOUT'],
        )
        current_app.extensions['bakery_api'] = api
    return api
