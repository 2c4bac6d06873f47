"""
Tests for configuring a product into a cart line item
"""
import unittest
from decimal import Decimal

from app.services.product_config import ProductConfiguration, configure, submit_to_cart, confirm_switch
from app.utils.errors import ConfigurationIncomplete, ModeConflict, NotFound, ValidationError
from tests.helpers import CAKE, CROISSANT, HOLIDAY, REGULAR, SOURDOUGH, line_item, make_cart, product


class TestProductConfiguration(unittest.TestCase):

    def setUp(self):
        self.config = ProductConfiguration(product(CAKE))

    def test_first_size_preselected(self):
        self.assertEqual(self.config.selected_size.id, 11)
        self.assertEqual(self.config.quantity, 1)
        self.assertEqual(self.config.base_price, Decimal('30'))

    def test_options_follow_selected_size(self):
        self.assertEqual([o.value for o in self.config.available_selections()['Flavor']], ['Vanilla', 'Chocolate'])
        self.assertIn('Topping', self.config.available_add_ons())

        self.config.select_size(12)

        self.assertEqual([o.value for o in self.config.available_selections()['Flavor']], ['Vanilla'])
        self.assertEqual(self.config.available_add_ons(), {})

    def test_size_change_resets_choices(self):
        self.config.choose_selection('Flavor', 102)
        self.config.toggle_add_on('Topping', 201)
        self.config.select_size(12)
        self.assertEqual(self.config.selections, {})
        self.assertEqual(self.config.add_ons, {})

    def test_special_cost_of_size_wins(self):
        self.config.select_size(12)
        self.assertEqual(self.config.base_price, Decimal('38'))

    def test_unknown_size(self):
        with self.assertRaises(NotFound):
            self.config.select_size(999)

    def test_missing_selection_names_category(self):
        with self.assertRaises(ConfigurationIncomplete) as ctx:
            self.config.build_line_item()
        self.assertEqual(ctx.exception.message, 'Please select a Flavor')
        self.assertEqual(ctx.exception.status_code, 400)

    def test_option_from_other_size_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.config.choose_selection('Flavor', 103)

    def test_pricing_includes_surcharges(self):
        self.config.choose_selection('Flavor', 102)
        self.config.toggle_add_on('Topping', 201)
        self.config.toggle_add_on('Topping', 202)
        self.config.set_quantity(2)

        self.assertEqual(self.config.unit_price, Decimal('36.5'))
        self.assertEqual(self.config.total_price, Decimal('73.0'))

    def test_add_on_toggle_off(self):
        self.config.toggle_add_on('Topping', 201)
        self.config.toggle_add_on('Topping', 201, checked=False)
        self.assertEqual(self.config.add_ons['Topping'], [])

    def test_quantity_at_least_one(self):
        self.config.set_quantity(0)
        self.assertEqual(self.config.quantity, 1)

    def test_build_line_item(self):
        self.config.choose_selection('Flavor', 102)
        self.config.toggle_add_on('Topping', 201)
        item = self.config.build_line_item()

        self.assertEqual(item.product_id, 2)
        self.assertEqual(item.size_id, 11)
        self.assertEqual(item.unit_price, Decimal('30'))
        self.assertEqual(item.selections['Flavor'].value, 'Chocolate')
        self.assertEqual([c.value for c in item.add_ons['Topping']], ['Sprinkles'])
        self.assertEqual(item.effective_unit_cost, Decimal('33.5'))
        self.assertEqual(item.product_snapshot['title'], 'Layer Cake')

    def test_unconfigured_product(self):
        config = ProductConfiguration(product(SOURDOUGH))
        self.assertFalse(config.product.needs_configuration)
        item = config.build_line_item()
        self.assertIsNone(item.size_id)
        self.assertEqual(item.unit_price, Decimal('10'))


class TestConfigure(unittest.TestCase):

    def test_replays_posted_choices(self):
        config = configure(product(CAKE), size_id='11', selections={'Flavor': '101'},
                           add_ons={'Topping': [202]}, quantity=3)
        self.assertEqual(config.selections['Flavor'].value, 'Vanilla')
        self.assertEqual(config.total_price, Decimal('99'))


class TestSubmitToCart(unittest.TestCase):

    def test_adds_item(self):
        cart = make_cart()
        item = configure(product(CROISSANT), quantity=2).build_line_item()
        submit_to_cart(cart, item, REGULAR)
        self.assertEqual(cart.item_count, 2)

    def test_conflict_raises_and_keeps_cart(self):
        cart = make_cart()
        cart.add_item(line_item(product_id=50), HOLIDAY)
        item = configure(product(CROISSANT)).build_line_item()

        with self.assertRaises(ModeConflict) as ctx:
            submit_to_cart(cart, item, REGULAR)

        conflict = ctx.exception.to_dict()['conflict']
        self.assertEqual(conflict['currentMode']['specialId'], 7)
        self.assertEqual(conflict['requestedMode'], {'type': 'regular'})
        self.assertEqual(conflict['pendingItem']['productId'], 3)
        self.assertEqual([i.product_id for i in cart.items], [50])

    def test_confirm_switch(self):
        cart = make_cart()
        cart.add_item(line_item(product_id=50), HOLIDAY)
        item = configure(product(CROISSANT)).build_line_item()

        confirm_switch(cart, item, REGULAR)

        self.assertEqual(cart.mode, REGULAR)
        self.assertEqual([i.product_id for i in cart.items], [3])


if __name__ == '__main__':
    unittest.main()
