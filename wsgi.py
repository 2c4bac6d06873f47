"""
WSGI entry point for production deployment
Served by gunicorn: gunicorn wsgi:app
Requires SECRET_KEY and BAKERY_API_URL; STRIPE_PUBLISHABLE_KEY enables checkout
"""
import os

from app import create_app

app = create_app(config_name=os.getenv('FLASK_ENV', 'production'))

if __name__ == "__main__":
    app.run()
