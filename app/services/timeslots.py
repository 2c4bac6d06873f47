"""Pickup timeslots offered for the current cart."""
import logging

from app.models.order import PickupTimeslot
from app.utils.formatting import format_date

logger = logging.getLogger(__name__)

REGULAR_DAYS_OUT = 6


def collect_times(api, catalog, items):
    """
    Merge the backend's timeslot maps that apply to the cart:
    special items only get their specials' times; otherwise regular times,
    plus the first special that contains every product in the cart.
    """
    special_type_id = catalog.special_type_id()
    special_items = [item for item in items if special_type_id is not None and item.product_type_id == special_type_id]
    all_times = {}
    specials_only = bool(special_items)

    if special_items:
        special_ids = []
        for special in catalog.specials():
            ids = special.product_ids()
            if any(item.product_id in ids for item in special_items) and special.id not in special_ids:
                special_ids.append(special.id)
        for special_id in special_ids:
            all_times.update(api.get_special_timeslots(special_id))
    else:
        product_ids = {item.product_id for item in items}
        for special in catalog.specials():
            if product_ids and product_ids <= special.product_ids():
                all_times.update(api.get_special_timeslots(special.id))
                break
        all_times.update(api.get_regular_timeslots(REGULAR_DAYS_OUT))

    return all_times, specials_only


def to_timeslots(all_times):
    """Active slots from a {timestamp: {amountLeft, active}} map, sorted by time"""
    slots = []
    for timestamp, info in all_times.items():
        slot = PickupTimeslot.from_dict({'timestamp': timestamp, **(info or {})})
        if not slot.active:
            continue
        try:
            starts_at = slot.starts_at
        except ValueError:
            logger.warning('Skipping unparseable timeslot %r', timestamp)
            continue
        slots.append((starts_at, slot))
    return [slot for _, slot in sorted(slots, key=lambda pair: pair[0])]


def group_by_date(slots):
    """[{'date': 'May 3, 2025', 'slots': [...]}, ...] in chronological order"""
    groups = []
    for slot in slots:
        label = format_date(slot.timestamp)
        if not groups or groups[-1]['date'] != label:
            groups.append({'date': label, 'slots': []})
        groups[-1]['slots'].append(slot)
    return groups


def available_timeslots(api, catalog, items):
    all_times, specials_only = collect_times(api, catalog, items)
    slots = to_timeslots(all_times)
    return {
        'specialsOnly': specials_only,
        'timeslots': slots,
        'dates': group_by_date(slots),
    }


def find_timeslot(api, catalog, items, timestamp):
    """The offered slot for timestamp, or None when it is not (or no longer) offered"""
    all_times, _ = collect_times(api, catalog, items)
    for slot in to_timeslots(all_times):
        if slot.timestamp == timestamp:
            return slot
    return None
