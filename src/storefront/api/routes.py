"""FastAPI routes for the storefront: orders, payments, refunds, inbox, stock.

Writes go through Protean commands processed synchronously; reads load the
aggregate from its repository and return its dict form.
"""

import json

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.address.address import Address
from storefront.address.book import RegisterAddress, RemoveAddress
from storefront.api.dependencies import Caller, get_caller, require_admin
from storefront.api.schemas import (
    AddProductRequest,
    AddressRequest,
    CancelOrderRequest,
    ConfigureGatewayRequest,
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    CreatePaymentIntentRequest,
    MarkAllReadResponse,
    PaymentIntentResponse,
    PlaceOrderRequest,
    ProcessRefundRequest,
    RequestRefundRequest,
    RestockRequest,
    ShipOrderRequest,
    StatusResponse,
    StockResponse,
)
from storefront.exceptions import ForbiddenError, NotFoundError
from storefront.gateway import get_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.notification.inbox import MarkAllNotificationsRead, MarkNotificationRead
from storefront.notification.notification import Notification
from storefront.order.cancellation import CancelOrder
from storefront.order.fulfillment import ConfirmOrder, DeliverOrder, ShipOrder
from storefront.order.order import CancellationActor, Order
from storefront.order.placement import PlaceOrder
from storefront.payment.initiation import CreatePaymentIntent
from storefront.payment.reconciliation import confirm_client_payment, receive_webhook
from storefront.product.product import Product
from storefront.product.stocking import AddProduct, RestockProduct
from storefront.refund.processing import CompleteRefund, ProcessRefund
from storefront.refund.refund import Refund
from storefront.refund.request import RequestRefund
from storefront.settings import get_settings


def _serialize(entity) -> dict:
    return jsonable_encoder(entity.to_dict())


def _paginate(entities, page: int, limit: int) -> dict:
    start = (page - 1) * limit
    return {
        "items": [_serialize(entity) for entity in entities[start : start + limit]],
        "page": page,
        "limit": limit,
        "total": len(entities),
    }


def _get_or_404(aggregate_cls, identifier, label):
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError as exc:
        raise NotFoundError({label: [f"{aggregate_cls.__name__} not found"]}) from exc


def _visible_order(order_id: str, caller: Caller) -> Order:
    order = _get_or_404(Order, order_id, "order_id")
    if not caller.is_admin and not order.is_owned_by(caller.user_id):
        raise ForbiddenError({"order_id": ["Order belongs to another customer"]})
    return order


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def place_order(body: PlaceOrderRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = PlaceOrder(
        customer_id=caller.user_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address_id=body.shipping_address_id,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _serialize(current_domain.repository_for(Order).get(order_id))


@order_router.get("")
async def list_orders(
    caller: Caller = Depends(get_caller),
    customer_id: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    owner = customer_id if caller.is_admin and customer_id else caller.user_id
    orders = current_domain.repository_for(Order).for_customer(owner)
    return _paginate(orders, page, limit)


@order_router.get("/{order_id}")
async def get_order(order_id: str, caller: Caller = Depends(get_caller)) -> dict:
    return _serialize(_visible_order(order_id, caller))


@order_router.get("/{order_id}/history")
async def get_order_history(order_id: str, caller: Caller = Depends(get_caller)) -> dict:
    order = _visible_order(order_id, caller)
    history = sorted(order.status_history, key=lambda change: change.changed_at)
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "history": [_serialize(change) for change in history],
    }


@order_router.post("/{order_id}/cancel")
async def cancel_order(order_id: str, body: CancelOrderRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = CancelOrder(
        order_id=order_id,
        requested_by=caller.user_id,
        reason=body.reason,
        cancelled_by=CancellationActor.ADMIN.value if caller.is_admin else CancellationActor.CUSTOMER.value,
    )
    current_domain.process(command, asynchronous=False)
    return _serialize(current_domain.repository_for(Order).get(order_id))


@order_router.post("/{order_id}/confirm")
async def confirm_order(order_id: str, caller: Caller = Depends(require_admin)) -> dict:
    current_domain.process(ConfirmOrder(order_id=order_id, changed_by=caller.user_id), asynchronous=False)
    return _serialize(current_domain.repository_for(Order).get(order_id))


@order_router.post("/{order_id}/ship")
async def ship_order(order_id: str, body: ShipOrderRequest, caller: Caller = Depends(require_admin)) -> dict:
    command = ShipOrder(order_id=order_id, tracking_number=body.tracking_number, changed_by=caller.user_id)
    current_domain.process(command, asynchronous=False)
    return _serialize(current_domain.repository_for(Order).get(order_id))


@order_router.post("/{order_id}/deliver")
async def deliver_order(order_id: str, caller: Caller = Depends(require_admin)) -> dict:
    current_domain.process(DeliverOrder(order_id=order_id, changed_by=caller.user_id), asynchronous=False)
    return _serialize(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", status_code=201, response_model=PaymentIntentResponse)
async def create_payment_intent(
    body: CreatePaymentIntentRequest, caller: Caller = Depends(get_caller)
) -> PaymentIntentResponse:
    command = CreatePaymentIntent(order_id=body.order_id, customer_id=caller.user_id)
    result = current_domain.process(command, asynchronous=False)
    return PaymentIntentResponse(**result)


@payment_router.post("/confirm", response_model=ConfirmPaymentResponse)
async def confirm_payment(body: ConfirmPaymentRequest, caller: Caller = Depends(get_caller)) -> ConfirmPaymentResponse:
    result = confirm_client_payment(
        customer_id=caller.user_id,
        gateway_order_id=body.razorpay_order_id,
        gateway_payment_id=body.razorpay_payment_id,
        signature=body.razorpay_signature,
    )
    return ConfirmPaymentResponse(**result)


@payment_router.post("/webhook")
async def payment_webhook(request: Request, x_razorpay_signature: str | None = Header(default=None)) -> JSONResponse:
    """Gateway callback. Always answers; the status code drives redelivery."""
    raw_body = await request.body()
    ack = receive_webhook(raw_body, x_razorpay_signature)
    return JSONResponse(content=ack.body, status_code=ack.status_code)


@payment_router.post("/gateway/configure", response_model=StatusResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> StatusResponse:
    """Switch the fake gateway between success and failure (development only)."""
    if get_settings().is_production:
        raise ForbiddenError({"gateway": ["Gateway configuration is disabled in production"]})
    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise ValidationError({"gateway": ["Only the fake gateway can be configured"]})
    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Refund Router
# ---------------------------------------------------------------------------
refund_router = APIRouter(prefix="/refunds", tags=["refunds"])


@refund_router.post("", status_code=201)
async def request_refund(body: RequestRefundRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = RequestRefund(
        order_id=body.order_id,
        requested_by=caller.user_id,
        reason=body.reason,
        kind=body.kind,
        description=body.description,
        is_admin=caller.is_admin,
    )
    refund_id = current_domain.process(command, asynchronous=False)
    return _serialize(current_domain.repository_for(Refund).get(refund_id))


@refund_router.get("")
async def list_refunds(
    caller: Caller = Depends(get_caller),
    status: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    customer_id = None if caller.is_admin else caller.user_id
    refunds = current_domain.repository_for(Refund).search(customer_id=customer_id, status=status)
    return _paginate(refunds, page, limit)


@refund_router.patch("/{refund_id}")
async def process_refund(refund_id: str, body: ProcessRefundRequest, caller: Caller = Depends(require_admin)) -> dict:
    command = ProcessRefund(
        refund_id=refund_id,
        action=body.action.upper(),
        processed_by=caller.user_id,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return _serialize(current_domain.repository_for(Refund).get(refund_id))


@refund_router.post("/{refund_id}/complete")
async def complete_refund(refund_id: str, caller: Caller = Depends(require_admin)) -> dict:
    current_domain.process(CompleteRefund(refund_id=refund_id, completed_by=caller.user_id), asynchronous=False)
    return _serialize(current_domain.repository_for(Refund).get(refund_id))


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


def _inbox_owner(caller: Caller, recipient_id: str | None) -> str:
    """Admins may read the shared operations and review inboxes."""
    if recipient_id and caller.is_admin:
        return recipient_id
    return caller.user_id


@notification_router.get("")
async def list_notifications(
    caller: Caller = Depends(get_caller),
    recipient_id: str | None = Query(default=None),
    unread_only: bool = Query(default=False),
) -> dict:
    notifications = current_domain.repository_for(Notification).inbox(
        _inbox_owner(caller, recipient_id), unread_only=unread_only
    )
    return {
        "items": [_serialize(notification) for notification in notifications],
        "unread": sum(1 for notification in notifications if not notification.is_read),
    }


@notification_router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    caller: Caller = Depends(get_caller),
    recipient_id: str | None = Query(default=None),
) -> dict:
    command = MarkNotificationRead(notification_id=notification_id, recipient_id=_inbox_owner(caller, recipient_id))
    current_domain.process(command, asynchronous=False)
    return _serialize(current_domain.repository_for(Notification).get(notification_id))


@notification_router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    caller: Caller = Depends(get_caller),
    recipient_id: str | None = Query(default=None),
) -> MarkAllReadResponse:
    command = MarkAllNotificationsRead(recipient_id=_inbox_owner(caller, recipient_id))
    updated = current_domain.process(command, asynchronous=False)
    return MarkAllReadResponse(updated=updated)


# ---------------------------------------------------------------------------
# Product Router (stock ledger)
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


def _stock_response(product: Product) -> StockResponse:
    return StockResponse(
        product_id=str(product.id),
        name=product.name,
        stock=product.stock,
        is_active=product.is_active,
    )


@product_router.post("", status_code=201, response_model=StockResponse)
async def add_product(body: AddProductRequest, caller: Caller = Depends(require_admin)) -> StockResponse:
    product_id = current_domain.process(AddProduct(**body.model_dump()), asynchronous=False)
    return _stock_response(current_domain.repository_for(Product).get(product_id))


@product_router.post("/{product_id}/restock", response_model=StockResponse)
async def restock_product(
    product_id: str, body: RestockRequest, caller: Caller = Depends(require_admin)
) -> StockResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return _stock_response(current_domain.repository_for(Product).get(product_id))


@product_router.get("/{product_id}/stock", response_model=StockResponse)
async def get_stock(product_id: str, caller: Caller = Depends(get_caller)) -> StockResponse:
    return _stock_response(_get_or_404(Product, product_id, "product_id"))


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.post("", status_code=201)
async def register_address(body: AddressRequest, caller: Caller = Depends(get_caller)) -> dict:
    address_id = current_domain.process(
        RegisterAddress(customer_id=caller.user_id, **body.model_dump()), asynchronous=False
    )
    return _serialize(current_domain.repository_for(Address).get(address_id))


@address_router.get("")
async def list_addresses(caller: Caller = Depends(get_caller)) -> dict:
    addresses = current_domain.repository_for(Address).for_customer(caller.user_id)
    return {"items": [_serialize(address) for address in addresses]}


@address_router.delete("/{address_id}", status_code=204)
async def remove_address(address_id: str, caller: Caller = Depends(get_caller)) -> None:
    current_domain.process(RemoveAddress(address_id=address_id, customer_id=caller.user_id), asynchronous=False)
