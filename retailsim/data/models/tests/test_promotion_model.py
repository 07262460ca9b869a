from datetime import datetime, timedelta

import pytest

from retailsim.data.models import ALL_ITEMS, Promotion, PromotionKind

START = datetime(2024, 5, 1)
END = datetime(2024, 5, 31)


def make_discount(rate=0.8, target=ALL_ITEMS, active=True):
    return Promotion.discount(
        promotion_id="PROMO001", name="Sale", valid_from=START, valid_until=END,
        target_item_id=target, discount_rate=rate, active=active,
    )


def make_reduction(threshold=300.0, reduction=50.0):
    return Promotion.full_reduction(
        promotion_id="PROMO002", name="Spend more", valid_from=START, valid_until=END,
        threshold_amount=threshold, reduction_amount=reduction,
    )


def test_validity_window_is_inclusive():
    """Both ends of the window count as valid."""
    p = make_discount()
    assert p.is_valid(START)
    assert p.is_valid(END)
    assert not p.is_valid(START - timedelta(seconds=1))
    assert not p.is_valid(END + timedelta(seconds=1))


def test_inactive_promotion_is_never_valid():
    assert not make_discount(active=False).is_valid(START + timedelta(days=1))


def test_discount_applies_to_target_or_all_items():
    assert make_discount(target=ALL_ITEMS).is_applicable_to_item("42")
    assert make_discount(target="7").is_applicable_to_item("7")
    assert not make_discount(target="7").is_applicable_to_item("8")


def test_full_reduction_never_applies_to_items():
    assert not make_reduction().is_applicable_to_item("1")


def test_price_after_discount():
    assert make_discount(rate=0.8).price_after_discount(100.0) == pytest.approx(80.0)
    assert make_reduction().price_after_discount(100.0) == 100.0


def test_reduction_only_at_or_above_threshold():
    r = make_reduction(300.0, 50.0)
    assert r.reduction_for(299.99) == 0.0
    assert r.reduction_for(300.0) == 50.0
    assert make_discount().reduction_for(1000.0) == 0.0


def test_display_tags():
    assert make_discount(rate=0.8).display_tag() == "8-tenths"
    assert make_discount(rate=0.75).display_tag() == "7-tenths"
    assert make_reduction(500.0, 100.0).display_tag() == "reduction: spend >= 500, save 100"


def test_kind_flags():
    assert make_discount().kind == PromotionKind.DISCOUNT
    assert make_discount().is_discount and not make_discount().is_full_reduction
    assert make_reduction().is_full_reduction and not make_reduction().is_discount
