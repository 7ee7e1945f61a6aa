"""Business-logic / service functions for the orders app."""
from __future__ import annotations

import logging

from django.db import transaction

from core.exceptions import DomainError
from orders.models import Order

logger = logging.getLogger("uniqverse")


class OrderStateError(DomainError):
    default_message = "Order cannot change to this status."


@transaction.atomic
def complete_order(order: Order) -> list:
    """Mark *order* DELIVERED and record vendor commissions for its items.

    Returns the commission records created (empty when the order holds no
    vendor products or was already completed).
    """
    from commissions.services import create_commissions_for_order

    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.status in (Order.Status.CANCELLED, Order.Status.REFUNDED):
        raise OrderStateError(
            f"Order {order.order_number} is {order.get_status_display().lower()} and cannot be completed.",
        )

    if order.status != Order.Status.DELIVERED:
        order.status = Order.Status.DELIVERED
        order.save(update_fields=["status", "updated_at"])
        logger.info("Order %s marked delivered", order.order_number)

    return create_commissions_for_order(order)


@transaction.atomic
def cancel_order(order: Order) -> Order:
    """Cancel *order*; commissions not yet paid out are cancelled with it.

    Commissions already PAID are left untouched.
    """
    from commissions.models import Commission
    from commissions.services import change_commission_status

    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.status == Order.Status.REFUNDED:
        raise OrderStateError(f"Order {order.order_number} is refunded and cannot be cancelled.")
    if order.status == Order.Status.CANCELLED:
        return order

    order.status = Order.Status.CANCELLED
    order.save(update_fields=["status", "updated_at"])

    open_commissions = order.commissions.filter(
        status__in=[Commission.Status.PENDING, Commission.Status.APPROVED],
    )
    for commission in open_commissions:
        change_commission_status(commission, Commission.Status.CANCELLED)

    logger.info("Order %s cancelled", order.order_number)
    return order
