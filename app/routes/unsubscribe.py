from flask import Blueprint, request, jsonify

from app.services.bakery_api import get_bakery_api
from app.utils.errors import UpstreamError, ValidationError
from app.utils.validators import validate_email

unsubscribe_bp = Blueprint('unsubscribe', __name__)


@unsubscribe_bp.route('', methods=['POST'])
def unsubscribe():
    """Remove an email address from the mailing list"""
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip()

    if not email:
        raise ValidationError('Please enter your email address')
    valid, message = validate_email(email)
    if not valid:
        raise ValidationError(message)

    try:
        get_bakery_api().unsubscribe(email)
    except UpstreamError as e:
        raise type(e)('Failed to unsubscribe. Please try again.') from e

    return jsonify({
        'message': 'You have been removed from our email list.'
    }), 200
