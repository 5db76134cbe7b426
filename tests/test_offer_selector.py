"""Offer selection over in-memory snapshots."""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from storeadmin.services.offer_service import (
    is_temporally_active, resolve_price, select_offer,
)

NOW = datetime(2025, 6, 1, 12, 0)


def offer(id, applies_to="all", *, category_id=None, product_id=None, is_active=True,
          start=NOW - timedelta(days=1), end=NOW + timedelta(days=1),
          discount_type="percentage", discount_value=10):
    return SimpleNamespace(
        id=id, applies_to=applies_to, category_id=category_id, product_id=product_id,
        is_active=is_active, start_date=start, end_date=end,
        discount_type=discount_type, discount_value=discount_value,
    )


PRODUCT = SimpleNamespace(id=7, category_id=3, price=200.0)


@pytest.mark.unit
class TestTemporalWindow:
    def test_inside_window(self):
        assert is_temporally_active(offer(1), NOW)

    def test_boundaries_are_inclusive(self):
        assert is_temporally_active(offer(1, start=NOW, end=NOW + timedelta(hours=1)), NOW)
        assert is_temporally_active(offer(1, start=NOW - timedelta(hours=1), end=NOW), NOW)

    def test_flag_off_is_never_active(self):
        assert not is_temporally_active(offer(1, is_active=False), NOW)

    def test_aware_now_is_compared_as_utc(self):
        o = offer(1, end=datetime(2025, 6, 1, 12, 0))
        # 14:30 in UTC+3 is 11:30 UTC, still inside the window
        now = datetime(2025, 6, 1, 14, 30, tzinfo=timezone(timedelta(hours=3)))
        assert is_temporally_active(o, now)
        assert not is_temporally_active(o, now + timedelta(hours=1))

    def test_outside_window(self):
        assert not is_temporally_active(offer(1, start=NOW + timedelta(seconds=1)), NOW)
        assert not is_temporally_active(offer(1, end=NOW - timedelta(seconds=1)), NOW)


@pytest.mark.unit
class TestSelectOffer:
    def test_no_offers(self):
        assert select_offer(PRODUCT, 3, [], NOW) is None

    def test_category_offer_applies(self):
        cat = offer(1, "category", category_id=3)
        assert select_offer(PRODUCT, 3, [cat], NOW) is cat

    def test_other_category_ignored(self):
        assert select_offer(PRODUCT, 3, [offer(1, "category", category_id=4)], NOW) is None

    def test_other_product_ignored(self):
        assert select_offer(PRODUCT, 3, [offer(1, "product", product_id=8)], NOW) is None

    def test_product_offer_beats_category_and_all(self):
        everything = offer(1, "all")
        cat = offer(2, "category", category_id=3)
        prod = offer(3, "product", product_id=7)
        for order in ([everything, cat, prod], [prod, cat, everything], [cat, prod, everything]):
            assert select_offer(PRODUCT, 3, order, NOW) is prod

    def test_category_beats_all(self):
        everything = offer(1, "all", start=NOW - timedelta(hours=1))
        cat = offer(2, "category", category_id=3, start=NOW - timedelta(days=5))
        assert select_offer(PRODUCT, 3, [everything, cat], NOW) is cat

    def test_same_scope_latest_start_wins(self):
        older = offer(1, "category", category_id=3, start=NOW - timedelta(days=3))
        newer = offer(2, "category", category_id=3, start=NOW - timedelta(days=1))
        assert select_offer(PRODUCT, 3, [newer, older], NOW) is newer
        assert select_offer(PRODUCT, 3, [older, newer], NOW) is newer

    def test_full_tie_lowest_id_wins(self):
        a, b = offer(5), offer(2)
        assert select_offer(PRODUCT, 3, [a, b], NOW) is b
        assert select_offer(PRODUCT, 3, [b, a], NOW) is b

    def test_inactive_product_offer_falls_back(self):
        prod = offer(1, "product", product_id=7, is_active=False)
        cat = offer(2, "category", category_id=3)
        assert select_offer(PRODUCT, 3, [prod, cat], NOW) is cat

    def test_expired_offer_skipped(self):
        expired = offer(1, "product", product_id=7, end=NOW - timedelta(minutes=1))
        assert select_offer(PRODUCT, 3, [expired], NOW) is None

    def test_category_taken_from_product_when_not_given(self):
        cat = offer(1, "category", category_id=3)
        assert select_offer(PRODUCT, None, [cat], NOW) is cat

    def test_aware_now_accepted(self):
        cat = offer(1, "category", category_id=3)
        assert select_offer(PRODUCT, None, [cat], NOW.replace(tzinfo=timezone.utc)) is cat

    def test_input_list_not_reordered(self):
        offers = [offer(3), offer(1), offer(2)]
        select_offer(PRODUCT, 3, offers, NOW)
        assert [o.id for o in offers] == [3, 1, 2]


@pytest.mark.unit
class TestResolvePrice:
    def test_no_offer_keeps_price(self):
        applied, final = resolve_price(PRODUCT, [], NOW)
        assert applied is None
        assert final == 200

    def test_offer_price(self):
        prod = offer(1, "product", product_id=7, discount_type="fixed", discount_value=50)
        applied, final = resolve_price(PRODUCT, [prod], NOW)
        assert applied is prod
        assert final == 150

    def test_offer_price_clamped(self):
        prod = offer(1, "product", product_id=7, discount_type="fixed", discount_value=500)
        assert resolve_price(PRODUCT, [prod], NOW)[1] == 0
