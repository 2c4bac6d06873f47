"""
Product configuration: turns a catalog product plus the customer's choices
(size, selections, add-ons, quantity) into a cart line item.
"""
import logging

from app.models.cart import CartLineItem, Choice
from app.models.product import DEFAULT_SIZE_KEY
from app.utils.errors import ConfigurationIncomplete, ModeConflict, NotFound, ValidationError

logger = logging.getLogger(__name__)


class ProductConfiguration:
    """Form state for configuring one product"""

    def __init__(self, product):
        self.product = product
        self.quantity = 1
        # First size is preselected
        self.selected_size = product.sizes[0] if product.sizes else None
        self.selections = {}
        self.add_ons = {}

    @property
    def size_key(self):
        return self.selected_size.size if self.selected_size else DEFAULT_SIZE_KEY

    def select_size(self, size_id):
        size = self.product.get_size(size_id)
        if size is None:
            raise NotFound(f'Size {size_id} is not offered for {self.product.title}')
        self.selected_size = size
        # Choices are keyed per size
        self.selections = {}
        self.add_ons = {}

    def _options_for_size(self, option_map):
        size_key = self.size_key
        return {category: by_size[size_key] for category, by_size in option_map.items() if size_key in by_size}

    def available_selections(self):
        return self._options_for_size(self.product.selection_values)

    def available_add_ons(self):
        return self._options_for_size(self.product.add_on_values)

    @staticmethod
    def _find_option(options, category, option_id):
        for option in options.get(category, []):
            if option.id == option_id:
                return option
        raise ValidationError(f'Invalid option {option_id} for {category}')

    def choose_selection(self, category, option_id):
        self.selections[category] = self._find_option(self.available_selections(), category, option_id)

    def toggle_add_on(self, category, option_id, checked=True):
        option = self._find_option(self.available_add_ons(), category, option_id)
        current = [o for o in self.add_ons.get(category, []) if o.id != option.id]
        if checked:
            current.append(option)
        self.add_ons[category] = current

    def set_quantity(self, quantity):
        self.quantity = max(1, int(quantity))

    def validate(self):
        """Every selection category needs exactly one choice; add-ons are optional"""
        for category in self.available_selections():
            if self.selections.get(category) is None:
                raise ConfigurationIncomplete(category)

    @property
    def base_price(self):
        """Size price when a size is chosen, else the product price"""
        if self.selected_size:
            return self.selected_size.effective_cost
        return self.product.base_price

    @property
    def unit_price(self):
        """Per-unit price including selection and add-on surcharges"""
        price = self.base_price
        for option in self.selections.values():
            price += option.cost
        for options in self.add_ons.values():
            for option in options:
                price += option.cost
        return price

    @property
    def total_price(self):
        return self.unit_price * self.quantity

    def build_line_item(self):
        """
        The line item stores the size/base price as unit price and the choices
        with their costs, so the cart can recompute totals after quantity edits.
        """
        self.validate()
        return CartLineItem(
            product_id=self.product.id,
            display_name=self.product.title,
            quantity=self.quantity,
            unit_price=self.base_price,
            product_type_id=self.product.type_id,
            size_id=self.selected_size.id if self.selected_size else None,
            selections={k: Choice(value=o.value, cost=o.cost) for k, o in self.selections.items()},
            add_ons={k: [Choice(value=o.value, cost=o.cost) for o in options] for k, options in self.add_ons.items()},
            product_snapshot=self.product.snapshot(),
        )

    def to_dict(self):
        return {
            'product': self.product.to_dict(),
            'sizeId': self.selected_size.id if self.selected_size else None,
            'availableSelections': {k: [o.to_dict() for o in v] for k, v in self.available_selections().items()},
            'availableAddOns': {k: [o.to_dict() for o in v] for k, v in self.available_add_ons().items()},
            'quantity': self.quantity,
            'unitPrice': str(self.unit_price),
            'totalPrice': str(self.total_price),
        }


def configure(product, size_id=None, selections=None, add_ons=None, quantity=1):
    """Replay a posted configuration onto a fresh form for product"""
    config = ProductConfiguration(product)
    if size_id is not None:
        config.select_size(int(size_id))
    for category, option_id in (selections or {}).items():
        if option_id is not None:
            config.choose_selection(category, int(option_id))
    for category, option_ids in (add_ons or {}).items():
        for option_id in option_ids or []:
            config.toggle_add_on(category, int(option_id))
    config.set_quantity(quantity)
    return config


def submit_to_cart(cart, item, mode):
    """
    Add item to the cart under mode. On a mode conflict nothing changes and
    ModeConflict carries the prompt text; the caller switches only after
    the customer confirms.
    """
    if cart.add_item(item, mode):
        return item
    raise ModeConflict(cart.conflict_message(mode), cart.mode, mode, item)


def confirm_switch(cart, item, mode):
    """Customer confirmed clearing the cart: start over in mode with item"""
    logger.info('Cart cleared to switch mode to %s', mode.to_dict())
    cart.switch_mode(mode, item)
    return item
