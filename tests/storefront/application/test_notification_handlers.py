"""Application tests for notification event handlers and the in-app inbox."""

import pytest
from protean import current_domain
from storefront.exceptions import NotFoundError
from storefront.notification.inbox import MarkAllNotificationsRead, MarkNotificationRead
from storefront.notification.notification import (
    Notification,
    NotificationChannel,
    NotificationStatus,
    NotificationType,
    RecipientType,
)
from storefront.order.fulfillment import ConfirmOrder, ShipOrder
from storefront.order.order import Order, PaymentStatus
from storefront.payment.reconciliation import confirm_client_payment, receive_webhook
from storefront.product.product import Product
from storefront.refund.processing import ProcessRefund
from storefront.refund.request import RequestRefund


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _inbox(recipient_id, unread_only=False):
    return current_domain.repository_for(Notification).inbox(recipient_id, unread_only=unread_only)


def _of_type(notification_type, recipient_id="cust-001"):
    notifications = current_domain.repository_for(Notification)._dao.query.filter(
        recipient_id=recipient_id, notification_type=notification_type
    )
    return notifications.all().items


@pytest.fixture()
def pay(signed_webhook):
    def _pay(placed, payment_id="pay_001"):
        return receive_webhook(*signed_webhook("payment.captured", placed["intent"]["gateway_order_id"], payment_id))

    return _pay


class TestPaymentNotifications:
    def test_paid_order_sends_confirmation_email_and_inbox_entry(self, checkout, pay, mailbox):
        placed = checkout(price=100.0, quantity=2)
        pay(placed)

        confirmations = _of_type(NotificationType.ORDER_CONFIRMATION.value)
        assert sorted(n.channel for n in confirmations) == [
            NotificationChannel.EMAIL.value,
            NotificationChannel.IN_APP.value,
        ]
        assert all(n.status == NotificationStatus.SENT.value for n in confirmations)
        assert all(n.source_event_id == placed["order_id"] for n in confirmations)

        (email,) = mailbox.emails_to("cust-001")
        assert email["subject"].startswith("Order Confirmed")
        assert "250.00" in email["body"]

    def test_failed_payment_notifies_customer_in_app(self, checkout, signed_webhook, mailbox):
        placed = checkout()
        receive_webhook(
            *signed_webhook(
                "payment.failed",
                placed["intent"]["gateway_order_id"],
                "pay_001",
                error_description="Card declined",
            )
        )

        (notification,) = _of_type(NotificationType.PAYMENT_FAILED.value)
        assert notification.channel == NotificationChannel.IN_APP.value
        assert mailbox.sent_emails == []


class TestDispatchFailures:
    def test_failed_email_does_not_affect_the_order(self, checkout, pay, mailbox):
        mailbox.configure(should_succeed=False, failure_reason="Mailbox full")
        placed = checkout()

        ack = pay(placed)

        assert (ack.status_code, ack.outcome) == (200, "completed")
        order = current_domain.repository_for(Order).get(placed["order_id"])
        assert order.payment_status == PaymentStatus.COMPLETED.value

        by_channel = {n.channel: n for n in _of_type(NotificationType.ORDER_CONFIRMATION.value)}
        assert by_channel[NotificationChannel.EMAIL.value].status == NotificationStatus.FAILED.value
        assert by_channel[NotificationChannel.EMAIL.value].failure_reason == "Mailbox full"
        assert by_channel[NotificationChannel.IN_APP.value].status == NotificationStatus.SENT.value

    def test_failed_email_does_not_fail_client_confirmation(self, checkout, sign_checkout_callback, mailbox):
        mailbox.configure(should_succeed=False, failure_reason="Mailbox full")
        placed = checkout()
        gateway_order_id = placed["intent"]["gateway_order_id"]

        result = confirm_client_payment(
            customer_id="cust-001",
            gateway_order_id=gateway_order_id,
            gateway_payment_id="pay_client_001",
            signature=sign_checkout_callback(gateway_order_id, "pay_client_001"),
        )

        assert result["status"] == "completed"
        email = next(
            n
            for n in _of_type(NotificationType.ORDER_CONFIRMATION.value)
            if n.channel == NotificationChannel.EMAIL.value
        )
        assert email.status == NotificationStatus.FAILED.value

    def test_adapter_exception_is_contained(self, checkout, pay, mailbox):
        mailbox.configure(raise_on_send=True, failure_reason="SMTP connection refused")
        placed = checkout()

        assert pay(placed).outcome == "completed"

        email = next(
            n
            for n in _of_type(NotificationType.ORDER_CONFIRMATION.value)
            if n.channel == NotificationChannel.EMAIL.value
        )
        assert email.status == NotificationStatus.FAILED.value
        assert "SMTP connection refused" in email.failure_reason


class TestFulfilmentNotifications:
    def test_shipping_update_carries_tracking_number(self, checkout, pay, mailbox):
        placed = checkout()
        pay(placed)
        _process(ConfirmOrder(order_id=placed["order_id"], changed_by="admin-001"))
        _process(ShipOrder(order_id=placed["order_id"], tracking_number="BLUEDART-42", changed_by="admin-001"))

        assert len(_of_type(NotificationType.ORDER_STATUS_UPDATE.value)) == 1
        shipping = _of_type(NotificationType.SHIPPING_UPDATE.value)
        assert len(shipping) == 2
        assert all("BLUEDART-42" in n.body for n in shipping)
        assert any("BLUEDART-42" in email["body"] for email in mailbox.emails_to("cust-001"))


class TestRefundNotifications:
    def test_request_notifies_customer_and_review_queue(self, checkout, pay):
        placed = checkout()
        pay(placed)

        _process(
            RequestRefund(
                order_id=placed["order_id"],
                requested_by="cust-001",
                reason="The package arrived damaged and leaking",
            )
        )

        assert len(_of_type(NotificationType.REFUND_REQUESTED.value)) == 1
        (review,) = _inbox("refund-review")
        assert review.notification_type == NotificationType.REFUND_REVIEW.value
        assert review.recipient_type == RecipientType.INTERNAL.value

    def test_approval_emails_the_customer(self, checkout, pay, mailbox):
        placed = checkout()
        pay(placed)
        refund_id = _process(
            RequestRefund(
                order_id=placed["order_id"],
                requested_by="cust-001",
                reason="The package arrived damaged and leaking",
            )
        )

        _process(ProcessRefund(refund_id=refund_id, action="APPROVE", processed_by="admin-001"))

        assert len(_of_type(NotificationType.REFUND_APPROVED.value)) == 2
        assert any("5-7 business days" in email["body"] for email in mailbox.emails_to("cust-001"))


class TestStockAlerts:
    def test_oversell_raises_operations_alert(self, add_product, place_order, open_intent, signed_webhook):
        product_id = add_product(stock=2)
        first = place_order([(product_id, 2)])
        second = place_order([(product_id, 2)])

        for index, order_id in enumerate([first, second], start=1):
            intent = open_intent(order_id)
            receive_webhook(*signed_webhook("payment.captured", intent["gateway_order_id"], f"pay_{index:03d}"))

        assert current_domain.repository_for(Product).get(product_id).stock == 0
        alerts = _inbox("operations")
        assert [n.notification_type for n in alerts] == [NotificationType.STOCK_SHORTFALL.value]


class TestInbox:
    @pytest.fixture()
    def unread(self, checkout, pay):
        pay(checkout())
        return _inbox("cust-001", unread_only=True)

    def test_mark_one_read(self, unread):
        target = unread[0]

        _process(MarkNotificationRead(notification_id=str(target.id), recipient_id="cust-001"))

        assert current_domain.repository_for(Notification).get(target.id).is_read
        assert len(_inbox("cust-001", unread_only=True)) == len(unread) - 1

    def test_other_recipient_cannot_mark_read(self, unread):
        with pytest.raises(NotFoundError):
            _process(MarkNotificationRead(notification_id=str(unread[0].id), recipient_id="cust-002"))

    def test_unknown_notification(self):
        with pytest.raises(NotFoundError):
            _process(MarkNotificationRead(notification_id="missing", recipient_id="cust-001"))

    def test_mark_all_read_returns_count(self, unread):
        assert unread

        updated = _process(MarkAllNotificationsRead(recipient_id="cust-001"))

        assert updated == len(unread)
        assert _inbox("cust-001", unread_only=True) == []
        assert _process(MarkAllNotificationsRead(recipient_id="cust-001")) == 0
