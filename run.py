"""Development server for the bakery storefront"""
import logging
import os

from dotenv import load_dotenv

from app import create_app

# .env holds BAKERY_API_URL and STRIPE_PUBLISHABLE_KEY for local runs
load_dotenv()

app = create_app(config_name=os.getenv('FLASK_ENV', 'development'))

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV') == 'development'
    logging.getLogger(__name__).info('Storefront on port %d, backend %s', port, app.config['BAKERY_API_URL'])
    app.run(host='0.0.0.0', port=port, debug=debug)
