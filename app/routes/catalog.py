from flask import Blueprint, request, jsonify

from app.services.catalog import get_catalog

catalog_bp = Blueprint('catalog', __name__)


@catalog_bp.route('/products', methods=['GET'])
def list_products():
    """Regular menu, optionally filtered to one product type"""
    type_id = request.args.get('type', type=int)
    include_sold_out = request.args.get('includeSoldOut') == 'true'
    catalog = get_catalog()

    menu = catalog.regular_menu(include_sold_out)
    products = [p for p in menu if p.type_id == type_id] if type_id is not None else menu

    return jsonify({
        'products': [p.to_dict() for p in products],
        'categories': catalog.categories(menu),
        'total': len(products)
    }), 200


@catalog_bp.route('/product-types', methods=['GET'])
def list_product_types():
    """Product taxonomy"""
    return jsonify({
        'types': [t.to_dict() for t in get_catalog().product_types()]
    }), 200


@catalog_bp.route('/specials', methods=['GET'])
def list_specials():
    """Specials that are active or still upcoming"""
    specials = get_catalog().available_specials()
    return jsonify({
        'specials': [s.to_dict() for s in specials],
        'total': len(specials)
    }), 200


@catalog_bp.route('/specials/<int:special_id>', methods=['GET'])
def get_special(special_id):
    """One special with its products"""
    special = get_catalog().get_special(special_id)
    return jsonify({'special': special.to_dict()}), 200
