"""
Tests for catalog queries and pickup timeslots
"""
import unittest
from datetime import datetime, timezone

from app.models.cart import RegularMode
from app.services.catalog import TYPES_RETRY_SECONDS, Catalog
from app.services.timeslots import available_timeslots, collect_times, find_timeslot, to_timeslots
from app.utils.errors import NotFound, UpstreamError
from tests.helpers import (BREAD_TYPE_ID, HOLIDAY, PASTRY_TYPE_ID, SPECIAL_TYPE_ID,
                           fake_api, line_item)


class TestCatalog(unittest.TestCase):

    def setUp(self):
        self.api = fake_api()
        self.catalog = Catalog(self.api)

    def test_regular_menu_excludes_specials(self):
        ids = [p.id for p in self.catalog.regular_menu()]
        self.assertEqual(ids, [1, 2, 3])

    def test_categories_in_first_seen_order(self):
        categories = self.catalog.categories(self.catalog.regular_menu())
        self.assertEqual(categories, [
            {'id': BREAD_TYPE_ID, 'name': 'Bread'},
            {'id': PASTRY_TYPE_ID, 'name': 'Pastry'},
        ])

    def test_product_types_are_cached(self):
        self.catalog.type_id('Bread')
        self.catalog.type_id('Pastry')
        self.assertEqual(self.api.fetch_product_types.call_count, 1)

    def test_tax_exempt_type(self):
        self.assertEqual(self.catalog.tax_exempt_type_id(), BREAD_TYPE_ID)

    def test_tax_exempt_type_unavailable(self):
        self.api.fetch_product_types.side_effect = UpstreamError('down')
        self.assertIsNone(self.catalog.tax_exempt_type_id())

    def test_malformed_product_types_tax_everything(self):
        self.api.fetch_product_types.return_value = [{'name': 'Bread'}]
        with self.assertRaises(UpstreamError):
            self.catalog.product_types()
        self.assertIsNone(Catalog(self.api).tax_exempt_type_id())

    def test_product_types_not_a_list(self):
        self.api.fetch_product_types.return_value = {'error': 'oops'}
        self.assertIsNone(self.catalog.tax_exempt_type_id())

    def test_malformed_products_and_specials(self):
        self.api.fetch_products.return_value = [{'title': 'No id'}]
        self.api.fetch_specials.return_value = [{'id': 1, 'name': 'x', 'start': 'soon', 'end': 'later'}]
        with self.assertRaises(UpstreamError):
            self.catalog.products()
        with self.assertRaises(UpstreamError):
            self.catalog.specials()

    def test_failed_product_types_fetch_is_remembered(self):
        now = [100.0]
        catalog = Catalog(self.api, clock=lambda: now[0])
        self.api.fetch_product_types.side_effect = UpstreamError('down')

        self.assertIsNone(catalog.tax_exempt_type_id())
        self.assertIsNone(catalog.tax_exempt_type_id())
        self.assertEqual(self.api.fetch_product_types.call_count, 1)

        now[0] += TYPES_RETRY_SECONDS
        self.api.fetch_product_types.side_effect = None
        self.assertEqual(catalog.tax_exempt_type_id(), BREAD_TYPE_ID)
        self.assertEqual(self.api.fetch_product_types.call_count, 2)

    def test_available_specials(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.assertEqual([s.id for s in self.catalog.available_specials(now)], [7])

    def test_get_special(self):
        self.assertEqual(self.catalog.get_special(7).name, 'Holiday Pies')
        with self.assertRaises(NotFound):
            self.catalog.get_special(99)

    def test_find_product_by_mode(self):
        self.assertEqual(self.catalog.find_product(50, HOLIDAY).title, 'Holiday Pie')
        self.assertEqual(self.catalog.find_product(2, RegularMode()).title, 'Layer Cake')
        with self.assertRaises(NotFound):
            self.catalog.find_product(2, HOLIDAY)


class TestTimeslots(unittest.TestCase):

    def setUp(self):
        self.api = fake_api()
        self.catalog = Catalog(self.api)

    def test_regular_cart_gets_regular_times(self):
        times, specials_only = collect_times(self.api, self.catalog, [line_item(product_id=2)])

        self.assertFalse(specials_only)
        self.api.get_regular_timeslots.assert_called_once_with(6)
        self.api.get_special_timeslots.assert_not_called()
        self.assertEqual(len(times), 3)

    def test_special_items_get_only_special_times(self):
        items = [line_item(product_id=50, type_id=SPECIAL_TYPE_ID)]
        times, specials_only = collect_times(self.api, self.catalog, items)

        self.assertTrue(specials_only)
        self.api.get_special_timeslots.assert_called_once_with(7)
        self.api.get_regular_timeslots.assert_not_called()
        self.assertEqual(list(times), ['2030-12-04T17:00:00Z'])

    def test_cart_covered_by_special_adds_its_times(self):
        times, _ = collect_times(self.api, self.catalog, [line_item(product_id=50)])
        self.api.get_special_timeslots.assert_called_once_with(7)
        self.assertEqual(len(times), 4)

    def test_inactive_slots_dropped_and_sorted(self):
        slots = to_timeslots({
            '2030-05-04T10:00:00Z': {'amountLeft': 1, 'active': True},
            '2030-05-03T16:00:00Z': {'amountLeft': 1, 'active': True},
            '2030-05-03T09:00:00Z': {'amountLeft': 0, 'active': False},
            'not a time': {'amountLeft': 1, 'active': True},
        })
        self.assertEqual([s.timestamp for s in slots], ['2030-05-03T16:00:00Z', '2030-05-04T10:00:00Z'])

    def test_grouped_by_date(self):
        result = available_timeslots(self.api, self.catalog, [line_item(product_id=2)])
        self.assertEqual([g['date'] for g in result['dates']], ['May 3, 2030', 'May 4, 2030'])
        self.assertEqual(result['timeslots'][0].amount_left, 5)

    def test_find_timeslot(self):
        items = [line_item(product_id=2)]
        slot = find_timeslot(self.api, self.catalog, items, '2030-05-04T10:00:00Z')
        self.assertEqual(slot.amount_left, 3)
        self.assertIsNone(find_timeslot(self.api, self.catalog, items, '2030-05-03T09:00:00Z'))


if __name__ == '__main__':
    unittest.main()
