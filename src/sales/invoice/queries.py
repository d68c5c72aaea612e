"""Invoice lookups shared by the handlers and the admin API."""

from protean.utils.globals import current_domain
from shared.queries import fetch_all

from sales.invoice.invoice import Invoice
from sales.order.order import Order


def order_invoices(order_id):
    query = current_domain.repository_for(Invoice)._dao.query.filter(order_id=str(order_id)).order_by("issue_date")
    return fetch_all(query)


def order_has_invoice(order_id):
    """True when the order has an invoice that was not cancelled."""
    return any(not invoice.is_cancelled for invoice in order_invoices(order_id))


def address_data(address):
    if address is None:
        return None
    return {
        "first_name": address.first_name,
        "last_name": address.last_name,
        "company": address.company,
        "address_line_1": address.address_line_1,
        "address_line_2": address.address_line_2,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "country": address.country,
        "phone": address.phone,
    }


def invoice_document(invoice_id):
    """Everything a PDF or email renderer needs to lay out an invoice."""
    invoice = current_domain.repository_for(Invoice).get(invoice_id)
    order = current_domain.repository_for(Order).get(str(invoice.order_id))
    billing = order.billing_address

    return {
        "invoice": {
            "id": str(invoice.id),
            "invoice_number": invoice.invoice_number,
            "status": invoice.status,
            "issue_date": invoice.issue_date.isoformat(),
            "due_date": invoice.due_date.isoformat(),
            "notes": invoice.notes,
        },
        "order": {
            "id": str(order.id),
            "order_number": order.order_number,
            "status": order.status,
            "payment_status": order.payment_status,
            "payment_method": order.payment_method,
            "shipping_method": order.shipping_method,
            "created_at": order.created_at.isoformat() if order.created_at else None,
        },
        "customer": {
            "id": str(order.customer_id) if order.customer_id else None,
            "email": order.customer_email,
            "name": f"{billing.first_name} {billing.last_name}" if billing else None,
        },
        "addresses": {
            "billing": address_data(order.billing_address),
            "shipping": address_data(order.shipping_address),
        },
        "items": [
            {
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
        "totals": {
            "subtotal": invoice.subtotal,
            "tax_amount": invoice.tax_amount,
            "shipping_amount": invoice.shipping_amount,
            "discount_amount": invoice.discount_amount,
            "total": invoice.total,
            "currency": invoice.currency,
        },
    }
