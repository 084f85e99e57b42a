# payments/services/archive.py

from __future__ import annotations

from payments.models import PaidOrderArchive, PaymentRecord


def archive_paid_order(*, payment: PaymentRecord, order) -> PaidOrderArchive:
    """
    Idempotent: one archive row per order_number.
    """
    archive, _ = PaidOrderArchive.objects.get_or_create(
        order_number=order.order_number,
        defaults={
            "order_id": order.id,
            "payment_id": payment.id,
            "customer_email": getattr(order.customer, "email", "") or "",
            "method": payment.method,
            "amount": payment.amount,
            "currency": payment.currency,
            "snapshot": {
                "status": order.status,
                "payment_status": order.payment_status,
                "total_amount": str(order.total_amount),
                "external_reference": payment.external_reference,
                "items": [
                    {"sku": item.sku, "quantity": item.quantity, "subtotal": str(item.subtotal)}
                    for item in order.items.all()
                ],
            },
        },
    )
    return archive
