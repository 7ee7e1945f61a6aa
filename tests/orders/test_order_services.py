from decimal import Decimal

import pytest

from catalog.models import Product
from commissions.models import Commission
from orders.models import Order
from orders.services import OrderStateError, cancel_order, complete_order


@pytest.mark.django_db
class TestCompleteOrder:
    def test_creates_commission_per_vendor_item(self, make_order, product, other_product, vendor_user):
        order = make_order([(product, 1, "100.00"), (other_product, 2, "35.00")], status=Order.Status.SHIPPED)

        commissions = complete_order(order)

        order.refresh_from_db()
        assert order.status == Order.Status.DELIVERED
        assert len(commissions) == 2
        mine = next(c for c in commissions if c.vendor_id == vendor_user.pk)
        assert mine.sale_amount == Decimal("100.00")
        assert mine.commission_rate == Decimal("0.08")
        assert mine.commission_amount == Decimal("8.00")
        assert mine.transaction_fee == Decimal("0.30")
        assert mine.status == Commission.Status.PENDING

    def test_new_vendor_bonus_from_trailing_metrics(self, make_order, product):
        # One delivered order, no reviews, no returns:
        # +0.5% fulfilment, +0.3% returns, -1% rating => -0.2%
        order = make_order([(product, 1, "100.00")])

        (commission,) = complete_order(order)

        assert commission.performance_bonus == Decimal("-0.20")
        assert commission.platform_earnings == Decimal("8.50")

    def test_is_idempotent(self, make_order, product):
        order = make_order([(product, 1, "100.00")])

        complete_order(order)
        second = complete_order(order)

        assert second == []
        assert Commission.objects.filter(order=order).count() == 1

    def test_skips_products_without_vendor(self, make_order, category):
        house_product = Product.objects.create(
            category=category, name="House Mug", sku="MUG-001", price=Decimal("12.00")
        )
        order = make_order([(house_product, 1, "12.00")])

        assert complete_order(order) == []

    def test_cancelled_order_cannot_be_completed(self, make_order, product):
        order = make_order([(product, 1, "100.00")], status=Order.Status.CANCELLED)

        with pytest.raises(OrderStateError):
            complete_order(order)
        assert not Commission.objects.exists()


@pytest.mark.django_db
class TestCancelOrder:
    def test_cancelling_delivered_order_cancels_unpaid_commissions(self, make_order, product):
        order = make_order([(product, 1, "100.00")])
        (commission,) = complete_order(order)

        cancel_order(order)

        order.refresh_from_db()
        commission.refresh_from_db()
        assert order.status == Order.Status.CANCELLED
        assert commission.status == Commission.Status.CANCELLED
        assert commission.processed_at is not None

    def test_paid_commissions_are_kept(self, make_order, make_commission, vendor_user, product):
        order = make_order([(product, 1, "100.00")], status=Order.Status.DELIVERED)
        paid = make_commission(vendor_user, product, order=order, status=Commission.Status.PAID)

        cancel_order(order)

        paid.refresh_from_db()
        assert paid.status == Commission.Status.PAID

    def test_refunded_order_cannot_be_cancelled(self, make_order, product):
        order = make_order([(product, 1, "100.00")], status=Order.Status.REFUNDED)

        with pytest.raises(OrderStateError):
            cancel_order(order)
