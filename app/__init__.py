from flask import Flask, jsonify
from flask_cors import CORS
import logging
import os

from app.services.bakery_api import DEFAULT_API_URL
from app.utils.errors import BakeryError

logger = logging.getLogger(__name__)


def create_app(config_name='development'):
    """Application factory pattern"""
    app = Flask(__name__)

    # Configuration
    if config_name == 'production':
        app.config['SECRET_KEY'] = os.getenv('SECRET_KEY')
        if not app.config['SECRET_KEY']:
            raise ValueError('SECRET_KEY environment variable is required for production')
        app.config['BAKERY_API_URL'] = os.getenv('BAKERY_API_URL')
        if not app.config['BAKERY_API_URL']:
            raise ValueError('BAKERY_API_URL environment variable is required for production')
        app.config['SESSION_COOKIE_SECURE'] = True
    else:
        app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
        app.config['BAKERY_API_URL'] = os.getenv('BAKERY_API_URL', DEFAULT_API_URL)
        app.config['TESTING'] = config_name == 'testing'

    app.config['STRIPE_PUBLISHABLE_KEY'] = os.getenv('STRIPE_PUBLISHABLE_KEY', '')
    app.config['BAKERY_API_TIMEOUT'] = float(os.getenv('BAKERY_API_TIMEOUT', 10))
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    if not app.config['STRIPE_PUBLISHABLE_KEY']:
        logger.error('STRIPE_PUBLISHABLE_KEY is not set; payments will be unavailable')

    CORS(app, resources={r"/api/*": {"origins": "*"}})

    @app.errorhandler(BakeryError)
    def handle_bakery_error(error):
        return jsonify(error.to_dict()), error.status_code

    # Register blueprints
    from app.routes.catalog import catalog_bp
    from app.routes.cart import cart_bp
    from app.routes.checkout import checkout_bp
    from app.routes.unsubscribe import unsubscribe_bp

    app.register_blueprint(catalog_bp, url_prefix='/api/catalog')
    app.register_blueprint(cart_bp, url_prefix='/api/cart')
    app.register_blueprint(checkout_bp, url_prefix='/api/checkout')
    app.register_blueprint(unsubscribe_bp, url_prefix='/api/unsubscribe')

    return app
