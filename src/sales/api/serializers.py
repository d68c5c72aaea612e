"""Explicit response shapes for Sales aggregates and read models."""

from sales.cart.totals import cart_totals
from sales.invoice.queries import address_data


def _iso(value):
    return value.isoformat() if value else None


def _id(value):
    return str(value) if value else None


def cart_data(cart):
    return {
        "id": str(cart.id),
        "customer_id": _id(cart.customer_id),
        "session_id": cart.session_id,
        "status": cart.status,
        "coupon_code": cart.coupon_code,
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "sku": item.sku,
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
                "row_total": item.row_total,
            }
            for item in cart.items
        ],
        "totals": cart_totals(cart),
    }


def wishlist_data(wishlist, customer_id):
    items = wishlist.items if wishlist else []
    return {
        "customer_id": str(customer_id),
        "items": [
            {"id": str(item.id), "product_id": str(item.product_id), "added_at": _iso(item.added_at)}
            for item in items
        ],
    }


def history_data(entry):
    return {
        "id": str(entry.id),
        "status_from": entry.status_from,
        "status_to": entry.status_to,
        "payment_status_from": entry.payment_status_from,
        "payment_status_to": entry.payment_status_to,
        "comment": entry.comment,
        "customer_notified": entry.customer_notified,
        "visible_to_customer": entry.visible_to_customer,
        "created_at": _iso(entry.created_at),
    }


def order_data(order, history=None):
    entries = order.history if history is None else history
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "customer_id": _id(order.customer_id),
        "customer_email": order.customer_email,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "shipping_method": order.shipping_method,
        "shipping_address": address_data(order.shipping_address),
        "billing_address": address_data(order.billing_address),
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "sku": item.sku,
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
                "tax_amount": item.tax_amount,
                "discount_amount": item.discount_amount,
                "row_total": item.row_total,
            }
            for item in order.items
        ],
        "subtotal": order.subtotal,
        "tax_amount": order.tax_amount,
        "shipping_amount": order.shipping_amount,
        "discount_amount": order.discount_amount,
        "total": order.total,
        "total_refunded": order.total_refunded,
        "max_refundable": order.max_refundable,
        "currency": order.currency,
        "notes": order.notes,
        "history": [history_data(entry) for entry in sorted(entries, key=lambda e: e.created_at)],
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def order_summary_data(summary):
    return {
        "id": str(summary.order_id),
        "order_number": summary.order_number,
        "customer_id": _id(summary.customer_id),
        "customer_email": summary.customer_email,
        "status": summary.status,
        "payment_status": summary.payment_status,
        "item_count": summary.item_count,
        "total": summary.total,
        "total_refunded": summary.total_refunded,
        "currency": summary.currency,
        "created_at": _iso(summary.created_at),
        "updated_at": _iso(summary.updated_at),
    }


def invoice_data(invoice):
    return {
        "id": str(invoice.id),
        "order_id": str(invoice.order_id),
        "invoice_number": invoice.invoice_number,
        "status": invoice.status,
        "issue_date": _iso(invoice.issue_date),
        "due_date": _iso(invoice.due_date),
        "subtotal": invoice.subtotal,
        "tax_amount": invoice.tax_amount,
        "shipping_amount": invoice.shipping_amount,
        "discount_amount": invoice.discount_amount,
        "total": invoice.total,
        "currency": invoice.currency,
        "notes": invoice.notes,
        "sent_at": _iso(invoice.sent_at),
        "paid_at": _iso(invoice.paid_at),
        "cancelled_at": _iso(invoice.cancelled_at),
    }


def shipment_data(shipment):
    return {
        "id": str(shipment.id),
        "order_id": str(shipment.order_id),
        "shipment_number": shipment.shipment_number,
        "carrier": shipment.carrier,
        "tracking_number": shipment.tracking_number,
        "tracking_url": shipment.tracking_url,
        "status": shipment.status,
        "items": [
            {
                "id": str(item.id),
                "order_item_id": str(item.order_item_id),
                "product_id": str(item.product_id),
                "sku": item.sku,
                "name": item.name,
                "quantity": item.quantity,
            }
            for item in shipment.items
        ],
        "notes": shipment.notes,
        "shipped_at": _iso(shipment.shipped_at),
        "delivered_at": _iso(shipment.delivered_at),
        "created_at": _iso(shipment.created_at),
    }


def credit_memo_data(memo):
    return {
        "id": str(memo.id),
        "order_id": str(memo.order_id),
        "credit_memo_number": memo.credit_memo_number,
        "status": memo.status,
        "refund_status": memo.refund_status,
        "refund_method": memo.refund_method,
        "items": [
            {
                "id": str(item.id),
                "order_item_id": str(item.order_item_id),
                "product_id": str(item.product_id),
                "sku": item.sku,
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
                "tax_amount": item.tax_amount,
                "discount_amount": item.discount_amount,
                "row_total": item.row_total,
                "restore_stock": item.restore_stock,
                "stock_restored": item.stock_restored,
            }
            for item in memo.items
        ],
        "subtotal": memo.subtotal,
        "tax_amount": memo.tax_amount,
        "shipping_amount": memo.shipping_amount,
        "discount_amount": memo.discount_amount,
        "adjustment_positive": memo.adjustment_positive,
        "adjustment_negative": memo.adjustment_negative,
        "grand_total": memo.grand_total,
        "currency": memo.currency,
        "notes": memo.notes,
        "admin_notes": memo.admin_notes,
        "refunded_at": _iso(memo.refunded_at),
        "inventory_restored_at": _iso(memo.inventory_restored_at),
        "created_at": _iso(memo.created_at),
    }


def transaction_data(transaction):
    return {
        "id": str(transaction.id),
        "transaction_number": transaction.transaction_number,
        "order_id": str(transaction.order_id),
        "credit_memo_id": _id(transaction.credit_memo_id),
        "parent_transaction_id": _id(transaction.parent_transaction_id),
        "type": transaction.type,
        "status": transaction.status,
        "gateway": transaction.gateway,
        "gateway_transaction_id": transaction.gateway_transaction_id,
        "amount": transaction.amount,
        "currency": transaction.currency,
        "response_data": transaction.response(),
        "notes": transaction.notes,
        "processed_at": _iso(transaction.processed_at),
        "created_at": _iso(transaction.created_at),
    }
