"""FastAPI endpoints for back-office order management."""

import json

from fastapi import APIRouter, Query
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.api import ApiResponse, paginated, success
from shared.queries import page_of

from sales.api.schemas import (
    AddOrderCommentRequest,
    CancelCreditMemoRequest,
    CancelInvoiceRequest,
    CancelOrderRequest,
    CancelShipmentRequest,
    CompleteTransactionRequest,
    CreateCreditMemoRequest,
    CreateInvoiceRequest,
    CreateOrderRequest,
    CreateShipmentRequest,
    FailTransactionRequest,
    RecordPaymentRequest,
    RecordTransactionRequest,
    RefundTransactionRequest,
    UpdateCreditMemoRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdateShipmentRequest,
    UpdateShipmentStatusRequest,
    UpdateTrackingRequest,
    WebhookTransactionRequest,
)
from sales.api.serializers import (
    credit_memo_data,
    invoice_data,
    order_data,
    order_summary_data,
    shipment_data,
    transaction_data,
)
from sales.credit_memo.creation import CreateCreditMemo
from sales.credit_memo.credit_memo import REFUND_CEILING_MESSAGE, CreditMemo, RefundStatus
from sales.credit_memo.inventory import RestoreCreditMemoInventory
from sales.credit_memo.management import (
    CancelCreditMemo,
    CompleteCreditMemo,
    DeleteCreditMemo,
    UpdateCreditMemo,
)
from sales.credit_memo.queries import order_credit_memos, refundable_items
from sales.credit_memo.refund import ProcessCreditMemoRefund
from sales.invoice.creation import CreateInvoice
from sales.invoice.invoice import Invoice
from sales.invoice.lifecycle import CancelInvoice, DeleteInvoice, MarkInvoicePaid, MarkInvoiceSent
from sales.invoice.queries import invoice_document, order_invoices
from sales.order.cancellation import CancelOrder
from sales.order.comments import AddOrderComment
from sales.order.creation import CreateOrder
from sales.order.order import Order
from sales.order.status import UpdateOrderStatus, UpdatePaymentStatus
from sales.projections.order_summary import OrderSummary
from sales.shipment.creation import CreateShipment
from sales.shipment.lifecycle import (
    CancelShipment,
    MarkShipped,
    UpdateShipment,
    UpdateShipmentStatus,
    UpdateTracking,
)
from sales.shipment.queries import order_shipments, shipment_statistics
from sales.shipment.shipment import Shipment
from sales.transaction.lifecycle import (
    CancelTransaction,
    MarkTransactionCompleted,
    MarkTransactionFailed,
    RetryTransaction,
)
from sales.transaction.queries import order_transactions, transaction_statistics
from sales.transaction.recording import LogWebhookTransaction, RecordPaymentIfMissing, RecordTransaction
from sales.transaction.refund import RefundTransaction
from sales.transaction.transaction import Transaction

order_admin_router = APIRouter(prefix="/api/v1/admin/orders", tags=["admin: orders"])
invoice_admin_router = APIRouter(prefix="/api/v1/admin/invoices", tags=["admin: invoices"])
shipment_admin_router = APIRouter(prefix="/api/v1/admin/shipments", tags=["admin: shipments"])
credit_memo_admin_router = APIRouter(prefix="/api/v1/admin/credit-memos", tags=["admin: credit memos"])
transaction_admin_router = APIRouter(prefix="/api/v1/admin/transactions", tags=["admin: transactions"])


def _listing(aggregate_cls, serializer, status, page, per_page, message, sort_field="created_at"):
    query = current_domain.repository_for(aggregate_cls)._dao.query
    if status:
        query = query.filter(status=status)
    page_items, total = page_of(query.order_by(f"-{sort_field}"), page, per_page)
    return paginated([serializer(record) for record in page_items], total, page, per_page, message)


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


# --- Orders ---


@order_admin_router.post("", status_code=201, response_model=ApiResponse)
async def create_order(body: CreateOrderRequest) -> ApiResponse:
    command = CreateOrder(
        customer_id=body.customer_id,
        customer_email=body.customer_email,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        shipping_method=body.shipping_method,
        payment_method=body.payment_method,
        shipping_amount=body.shipping_amount,
        discount_amount=body.discount_amount,
        tax_amount=body.tax_amount,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return success(order_data(_order(order_id)), "Order created")


@order_admin_router.get("", response_model=ApiResponse)
async def list_orders(
    status: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    query = current_domain.repository_for(OrderSummary)._dao.query
    if status:
        query = query.filter(status=status)
    page_items, total = page_of(query.order_by("-created_at"), page, per_page)
    return paginated([order_summary_data(s) for s in page_items], total, page, per_page, "Orders retrieved")


@order_admin_router.get("/{order_id}", response_model=ApiResponse)
async def get_order(order_id: str) -> ApiResponse:
    order = _order(order_id)
    data = order_data(order)
    data["invoices"] = [invoice_data(i) for i in order_invoices(order.id)]
    data["shipments"] = [shipment_data(s) for s in order_shipments(order.id)]
    data["credit_memos"] = [credit_memo_data(m) for m in order_credit_memos(order.id)]
    data["transactions"] = [transaction_data(t) for t in order_transactions(order.id)]
    return success(data, "Order retrieved")


@order_admin_router.put("/{order_id}/status", response_model=ApiResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> ApiResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        comment=body.comment,
        notify_customer=body.notify_customer,
    )
    current_domain.process(command, asynchronous=False)
    return success(order_data(_order(order_id)), "Order status updated")


@order_admin_router.put("/{order_id}/payment-status", response_model=ApiResponse)
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> ApiResponse:
    command = UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status, comment=body.comment)
    current_domain.process(command, asynchronous=False)
    return success(order_data(_order(order_id)), "Payment status updated")


@order_admin_router.post("/{order_id}/cancel", response_model=ApiResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> ApiResponse:
    command = CancelOrder(order_id=order_id, reason=body.reason, restore_stock=body.restore_stock)
    current_domain.process(command, asynchronous=False)
    return success(order_data(_order(order_id)), "Order cancelled")


@order_admin_router.post("/{order_id}/comments", status_code=201, response_model=ApiResponse)
async def add_order_comment(order_id: str, body: AddOrderCommentRequest) -> ApiResponse:
    command = AddOrderComment(
        order_id=order_id,
        comment=body.comment,
        notify_customer=body.notify_customer,
        visible_to_customer=body.visible_to_customer,
    )
    current_domain.process(command, asynchronous=False)
    return success(order_data(_order(order_id)), "Comment added")


@order_admin_router.get("/{order_id}/refundable-items", response_model=ApiResponse)
async def get_refundable_items(order_id: str) -> ApiResponse:
    order = _order(order_id)
    data = {"items": refundable_items(order.id), "max_refundable": order.max_refundable}
    return success(data, "Refundable items retrieved")


# --- Invoices ---


@invoice_admin_router.post("", status_code=201, response_model=ApiResponse)
async def create_invoice(body: CreateInvoiceRequest) -> ApiResponse:
    invoice_id = current_domain.process(CreateInvoice(order_id=body.order_id, notes=body.notes), asynchronous=False)
    return success(invoice_data(current_domain.repository_for(Invoice).get(invoice_id)), "Invoice created")


@invoice_admin_router.get("", response_model=ApiResponse)
async def list_invoices(
    status: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    return _listing(Invoice, invoice_data, status, page, per_page, "Invoices retrieved", sort_field="issue_date")


@invoice_admin_router.get("/{invoice_id}", response_model=ApiResponse)
async def get_invoice(invoice_id: str) -> ApiResponse:
    return success(invoice_data(current_domain.repository_for(Invoice).get(invoice_id)), "Invoice retrieved")


@invoice_admin_router.get("/{invoice_id}/document", response_model=ApiResponse)
async def get_invoice_document(invoice_id: str) -> ApiResponse:
    return success(invoice_document(invoice_id), "Invoice document")


@invoice_admin_router.put("/{invoice_id}/send", response_model=ApiResponse)
async def mark_invoice_sent(invoice_id: str) -> ApiResponse:
    current_domain.process(MarkInvoiceSent(invoice_id=invoice_id), asynchronous=False)
    return success(message="Invoice marked as sent")


@invoice_admin_router.put("/{invoice_id}/pay", response_model=ApiResponse)
async def mark_invoice_paid(invoice_id: str) -> ApiResponse:
    current_domain.process(MarkInvoicePaid(invoice_id=invoice_id), asynchronous=False)
    return success(message="Invoice marked as paid")


@invoice_admin_router.put("/{invoice_id}/cancel", response_model=ApiResponse)
async def cancel_invoice(invoice_id: str, body: CancelInvoiceRequest) -> ApiResponse:
    current_domain.process(CancelInvoice(invoice_id=invoice_id, reason=body.reason), asynchronous=False)
    return success(message="Invoice cancelled")


@invoice_admin_router.delete("/{invoice_id}", response_model=ApiResponse)
async def delete_invoice(invoice_id: str) -> ApiResponse:
    current_domain.process(DeleteInvoice(invoice_id=invoice_id), asynchronous=False)
    return success(message="Invoice deleted")


# --- Shipments ---


@shipment_admin_router.post("", status_code=201, response_model=ApiResponse)
async def create_shipment(body: CreateShipmentRequest) -> ApiResponse:
    command = CreateShipment(
        order_id=body.order_id,
        items=json.dumps(body.items),
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        notes=body.notes,
    )
    shipment_id = current_domain.process(command, asynchronous=False)
    return success(shipment_data(current_domain.repository_for(Shipment).get(shipment_id)), "Shipment created")


@shipment_admin_router.get("", response_model=ApiResponse)
async def list_shipments(
    status: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    return _listing(Shipment, shipment_data, status, page, per_page, "Shipments retrieved")


@shipment_admin_router.get("/statistics", response_model=ApiResponse)
async def get_shipment_statistics() -> ApiResponse:
    return success(shipment_statistics(), "Shipment statistics")


@shipment_admin_router.get("/{shipment_id}", response_model=ApiResponse)
async def get_shipment(shipment_id: str) -> ApiResponse:
    return success(shipment_data(current_domain.repository_for(Shipment).get(shipment_id)), "Shipment retrieved")


@shipment_admin_router.put("/{shipment_id}", response_model=ApiResponse)
async def update_shipment(shipment_id: str, body: UpdateShipmentRequest) -> ApiResponse:
    current_domain.process(UpdateShipment(shipment_id=shipment_id, **body.model_dump()), asynchronous=False)
    return success(message="Shipment updated")


@shipment_admin_router.put("/{shipment_id}/tracking", response_model=ApiResponse)
async def update_tracking(shipment_id: str, body: UpdateTrackingRequest) -> ApiResponse:
    current_domain.process(UpdateTracking(shipment_id=shipment_id, **body.model_dump()), asynchronous=False)
    return success(message="Tracking updated")


@shipment_admin_router.put("/{shipment_id}/ship", response_model=ApiResponse)
async def mark_shipped(shipment_id: str) -> ApiResponse:
    current_domain.process(MarkShipped(shipment_id=shipment_id), asynchronous=False)
    return success(message="Shipment marked as shipped")


@shipment_admin_router.put("/{shipment_id}/status", response_model=ApiResponse)
async def update_shipment_status(shipment_id: str, body: UpdateShipmentStatusRequest) -> ApiResponse:
    current_domain.process(UpdateShipmentStatus(shipment_id=shipment_id, status=body.status), asynchronous=False)
    return success(message="Shipment status updated")


@shipment_admin_router.put("/{shipment_id}/cancel", response_model=ApiResponse)
async def cancel_shipment(shipment_id: str, body: CancelShipmentRequest) -> ApiResponse:
    current_domain.process(CancelShipment(shipment_id=shipment_id, reason=body.reason), asynchronous=False)
    return success(message="Shipment cancelled")


# --- Credit memos ---


@credit_memo_admin_router.post("", status_code=201, response_model=ApiResponse)
async def create_credit_memo(body: CreateCreditMemoRequest) -> ApiResponse:
    command = CreateCreditMemo(
        order_id=body.order_id,
        items=json.dumps({key: item.model_dump() for key, item in body.items.items()}),
        refund_shipping=body.refund_shipping,
        adjustment_positive=body.adjustment_positive,
        adjustment_negative=body.adjustment_negative,
        refund_method=body.refund_method,
        notes=body.notes,
        process_refund=body.process_refund,
        restore_inventory=body.restore_inventory,
    )
    memo_id = current_domain.process(command, asynchronous=False)
    return success(credit_memo_data(current_domain.repository_for(CreditMemo).get(memo_id)), "Credit memo created")


@credit_memo_admin_router.get("", response_model=ApiResponse)
async def list_credit_memos(
    status: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    return _listing(CreditMemo, credit_memo_data, status, page, per_page, "Credit memos retrieved")


@credit_memo_admin_router.get("/{credit_memo_id}", response_model=ApiResponse)
async def get_credit_memo(credit_memo_id: str) -> ApiResponse:
    memo = current_domain.repository_for(CreditMemo).get(credit_memo_id)
    return success(credit_memo_data(memo), "Credit memo retrieved")


@credit_memo_admin_router.post("/{credit_memo_id}/refund", response_model=ApiResponse)
async def process_refund(credit_memo_id: str) -> ApiResponse:
    refund_status = current_domain.process(ProcessCreditMemoRefund(credit_memo_id=credit_memo_id), asynchronous=False)
    if refund_status == RefundStatus.FAILED.value:
        # The failure is already saved on the memo; report it after the commit
        raise ValidationError({"refund": [REFUND_CEILING_MESSAGE]})
    return success(message="Refund processed")


@credit_memo_admin_router.post("/{credit_memo_id}/restore-inventory", response_model=ApiResponse)
async def restore_inventory(credit_memo_id: str) -> ApiResponse:
    restored = current_domain.process(
        RestoreCreditMemoInventory(credit_memo_id=credit_memo_id),
        asynchronous=False,
    )
    return success({"restored_lines": restored or 0}, "Inventory restored")


@credit_memo_admin_router.put("/{credit_memo_id}/complete", response_model=ApiResponse)
async def complete_credit_memo(credit_memo_id: str) -> ApiResponse:
    current_domain.process(CompleteCreditMemo(credit_memo_id=credit_memo_id), asynchronous=False)
    return success(message="Credit memo completed")


@credit_memo_admin_router.put("/{credit_memo_id}/cancel", response_model=ApiResponse)
async def cancel_credit_memo(credit_memo_id: str, body: CancelCreditMemoRequest) -> ApiResponse:
    current_domain.process(CancelCreditMemo(credit_memo_id=credit_memo_id, reason=body.reason), asynchronous=False)
    return success(message="Credit memo cancelled")


@credit_memo_admin_router.put("/{credit_memo_id}", response_model=ApiResponse)
async def update_credit_memo(credit_memo_id: str, body: UpdateCreditMemoRequest) -> ApiResponse:
    current_domain.process(UpdateCreditMemo(credit_memo_id=credit_memo_id, **body.model_dump()), asynchronous=False)
    memo = current_domain.repository_for(CreditMemo).get(credit_memo_id)
    return success(credit_memo_data(memo), "Credit memo updated")


@credit_memo_admin_router.delete("/{credit_memo_id}", response_model=ApiResponse)
async def delete_credit_memo(credit_memo_id: str) -> ApiResponse:
    current_domain.process(DeleteCreditMemo(credit_memo_id=credit_memo_id), asynchronous=False)
    return success(message="Credit memo deleted")


# --- Transactions ---


def _transaction(transaction_id):
    return transaction_data(current_domain.repository_for(Transaction).get(transaction_id))


@transaction_admin_router.post("", status_code=201, response_model=ApiResponse)
async def record_transaction(body: RecordTransactionRequest) -> ApiResponse:
    command = RecordTransaction(
        order_id=body.order_id,
        transaction_type=body.transaction_type,
        amount=body.amount,
        status=body.status,
        gateway=body.gateway,
        gateway_transaction_id=body.gateway_transaction_id,
        response_data=json.dumps(body.response_data) if body.response_data else None,
        notes=body.notes,
    )
    transaction_id = current_domain.process(command, asynchronous=False)
    return success(_transaction(transaction_id), "Transaction recorded")


@transaction_admin_router.post("/payments", response_model=ApiResponse)
async def record_payment(body: RecordPaymentRequest) -> ApiResponse:
    transaction_id = current_domain.process(RecordPaymentIfMissing(**body.model_dump()), asynchronous=False)
    return success(_transaction(transaction_id), "Payment recorded")


@transaction_admin_router.post("/webhooks", status_code=201, response_model=ApiResponse)
async def log_webhook_transaction(body: WebhookTransactionRequest) -> ApiResponse:
    command = LogWebhookTransaction(
        order_id=body.order_id,
        gateway=body.gateway,
        gateway_transaction_id=body.gateway_transaction_id,
        transaction_type=body.transaction_type,
        status=body.status,
        amount=body.amount,
        raw_payload=json.dumps(body.payload),
    )
    transaction_id = current_domain.process(command, asynchronous=False)
    return success(_transaction(transaction_id), "Webhook transaction logged")


@transaction_admin_router.get("", response_model=ApiResponse)
async def list_transactions(
    status: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    return _listing(Transaction, transaction_data, status, page, per_page, "Transactions retrieved")


@transaction_admin_router.get("/statistics", response_model=ApiResponse)
async def get_transaction_statistics() -> ApiResponse:
    return success(transaction_statistics(), "Transaction statistics")


@transaction_admin_router.get("/{transaction_id}", response_model=ApiResponse)
async def get_transaction(transaction_id: str) -> ApiResponse:
    return success(_transaction(transaction_id), "Transaction retrieved")


@transaction_admin_router.post("/{transaction_id}/refund", status_code=201, response_model=ApiResponse)
async def refund_transaction(transaction_id: str, body: RefundTransactionRequest) -> ApiResponse:
    refund_id = current_domain.process(
        RefundTransaction(transaction_id=transaction_id, **body.model_dump()),
        asynchronous=False,
    )
    return success(_transaction(refund_id), "Refund transaction created")


@transaction_admin_router.put("/{transaction_id}/complete", response_model=ApiResponse)
async def complete_transaction(transaction_id: str, body: CompleteTransactionRequest) -> ApiResponse:
    command = MarkTransactionCompleted(
        transaction_id=transaction_id,
        response_data=json.dumps(body.response_data) if body.response_data else None,
    )
    current_domain.process(command, asynchronous=False)
    return success(_transaction(transaction_id), "Transaction completed")


@transaction_admin_router.put("/{transaction_id}/fail", response_model=ApiResponse)
async def fail_transaction(transaction_id: str, body: FailTransactionRequest) -> ApiResponse:
    current_domain.process(MarkTransactionFailed(transaction_id=transaction_id, reason=body.reason), asynchronous=False)
    return success(_transaction(transaction_id), "Transaction marked as failed")


@transaction_admin_router.put("/{transaction_id}/retry", response_model=ApiResponse)
async def retry_transaction(transaction_id: str) -> ApiResponse:
    current_domain.process(RetryTransaction(transaction_id=transaction_id), asynchronous=False)
    return success(_transaction(transaction_id), "Transaction queued for retry")


@transaction_admin_router.put("/{transaction_id}/cancel", response_model=ApiResponse)
async def cancel_transaction(transaction_id: str) -> ApiResponse:
    current_domain.process(CancelTransaction(transaction_id=transaction_id), asynchronous=False)
    return success(_transaction(transaction_id), "Transaction cancelled")
