from flask import Blueprint, request, jsonify

from app.models.cart import RegularMode, SpecialMode
from app.services import current_cart
from app.services.catalog import get_catalog
from app.services.product_config import configure, submit_to_cart, confirm_switch
from app.utils.errors import ValidationError
from app.utils.validators import validate_quantity

cart_bp = Blueprint('cart', __name__)


def _as_int(value, name):
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f'{name} must be a number') from e


def _requested_mode(data):
    """Ordering mode of the page the item was added from"""
    mode = data.get('mode') or {'type': 'regular'}
    if not isinstance(mode, dict):
        raise ValidationError('Invalid ordering mode')
    if mode.get('type') == 'special':
        if mode.get('specialId') is None:
            raise ValidationError('specialId is required for special orders')
        special = get_catalog().get_special(_as_int(mode['specialId'], 'specialId'))
        return SpecialMode(special_id=special.id, special_name=special.name)
    return RegularMode()


def _configuration_from_request(data):
    if 'productId' not in data:
        raise ValidationError('productId is required')
    valid, quantity = validate_quantity(data.get('quantity', 1))
    if not valid:
        raise ValidationError(quantity)

    mode = _requested_mode(data)
    product = get_catalog().find_product(_as_int(data['productId'], 'productId'), mode)
    try:
        config = configure(
            product,
            size_id=data.get('sizeId'),
            selections=data.get('selections'),
            add_ons=data.get('addOns'),
            quantity=quantity,
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError('Invalid product configuration') from e
    return config, mode


@cart_bp.route('', methods=['GET'])
def get_cart():
    """Get the cart with its totals"""
    return jsonify(current_cart().to_dict()), 200


@cart_bp.route('/preview', methods=['POST'])
def preview_item():
    """Price and available options for a configuration, without adding it"""
    data = request.get_json(silent=True) or {}
    config, _ = _configuration_from_request(data)
    return jsonify(config.to_dict()), 200


@cart_bp.route('/items', methods=['POST'])
def add_to_cart():
    """Add a configured product to the cart"""
    data = request.get_json(silent=True) or {}
    config, mode = _configuration_from_request(data)
    item = config.build_line_item()

    cart = current_cart()
    submit_to_cart(cart, item, mode)

    return jsonify({
        'message': f'Added {item.quantity}x {item.display_name} to cart',
        'cart': cart.to_dict()
    }), 201


@cart_bp.route('/switch', methods=['POST'])
def switch_cart_mode():
    """Clear the cart and start it over with this item, after the customer confirmed"""
    data = request.get_json(silent=True) or {}
    if data.get('confirm') is not True:
        raise ValidationError('Clearing the cart must be confirmed')

    config, mode = _configuration_from_request(data)
    item = config.build_line_item()

    cart = current_cart()
    confirm_switch(cart, item, mode)

    return jsonify({
        'message': f'Cart cleared. Added {item.quantity}x {item.display_name} to cart',
        'cart': cart.to_dict()
    }), 200


@cart_bp.route('/items/<int:index>', methods=['PUT'])
def update_cart_item(index):
    """Update cart item quantity; zero or less removes it"""
    data = request.get_json(silent=True) or {}
    valid, quantity = validate_quantity(data.get('quantity'))
    if not valid:
        raise ValidationError(quantity)

    cart = current_cart()
    cart.update_quantity(index, quantity)
    return jsonify({
        'message': 'Cart item updated successfully' if quantity > 0 else 'Item removed from cart successfully',
        'cart': cart.to_dict()
    }), 200


@cart_bp.route('/items/<int:index>', methods=['DELETE'])
def remove_from_cart(index):
    """Remove item from cart"""
    cart = current_cart()
    cart.remove_item(index)
    return jsonify({
        'message': 'Item removed from cart successfully',
        'cart': cart.to_dict()
    }), 200


@cart_bp.route('', methods=['DELETE'])
def clear_cart():
    """Clear entire cart"""
    cart = current_cart()
    cart.clear_cart()
    return jsonify({
        'message': 'Cart cleared successfully',
        'cart': cart.to_dict()
    }), 200
