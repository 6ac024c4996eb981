"""Integration tests for the refund and notification endpoints."""

import httpx
import pytest
from storefront.gateway import set_gateway
from storefront.gateway.razorpay_adapter import RazorpayGateway

CUSTOMER = {"X-User-Id": "cust-001"}
OTHER_CUSTOMER = {"X-User-Id": "cust-002"}
ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "admin"}

REASON = "The package arrived damaged and leaking"


def _refuse_connection(request):
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture()
def refund(client, api_paid_order):
    response = client.post(
        "/refunds",
        json={"order_id": api_paid_order["order"]["id"], "reason": REASON},
        headers=CUSTOMER,
    )
    assert response.status_code == 201
    return response.json()


class TestRequestRefundEndpoint:
    def test_request(self, refund, api_paid_order):
        assert refund["status"] == "Pending"
        assert refund["amount"] == 250.0
        assert refund["order_id"] == api_paid_order["order"]["id"]

    def test_unpaid_order(self, client, api_checkout):
        order_id = api_checkout()["order"]["id"]
        response = client.post("/refunds", json={"order_id": order_id, "reason": REASON}, headers=CUSTOMER)
        assert response.status_code == 409

    def test_duplicate(self, client, refund):
        response = client.post("/refunds", json={"order_id": refund["order_id"], "reason": REASON}, headers=CUSTOMER)
        assert response.status_code == 409

    def test_return_before_delivery(self, client, api_paid_order):
        response = client.post(
            "/refunds",
            json={"order_id": api_paid_order["order"]["id"], "reason": REASON, "kind": "Return"},
            headers=CUSTOMER,
        )
        assert response.status_code == 400

    def test_other_customer(self, client, api_paid_order):
        response = client.post(
            "/refunds",
            json={"order_id": api_paid_order["order"]["id"], "reason": REASON},
            headers=OTHER_CUSTOMER,
        )
        assert response.status_code == 404


class TestListRefunds:
    def test_customer_sees_own(self, client, refund):
        assert client.get("/refunds", headers=CUSTOMER).json()["total"] == 1
        assert client.get("/refunds", headers=OTHER_CUSTOMER).json()["total"] == 0

    def test_admin_filters_by_status(self, client, refund):
        assert client.get("/refunds?status=Pending", headers=ADMIN).json()["total"] == 1
        assert client.get("/refunds?status=Approved", headers=ADMIN).json()["total"] == 0


class TestProcessRefundEndpoint:
    def test_approve(self, client, refund):
        response = client.patch(f"/refunds/{refund['id']}", json={"action": "approve"}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["status"] == "Approved"

        order = client.get(f"/orders/{refund['order_id']}", headers=CUSTOMER).json()
        assert order["payment_status"] == "Refunded"
        assert order["status"] == "Cancelled"

    def test_reject_then_reprocess(self, client, refund):
        rejected = client.patch(
            f"/refunds/{refund['id']}",
            json={"action": "REJECT", "notes": "Seal broken by customer"},
            headers=ADMIN,
        )
        assert rejected.json()["status"] == "Rejected"

        again = client.patch(f"/refunds/{refund['id']}", json={"action": "APPROVE"}, headers=ADMIN)
        assert again.status_code == 409

    def test_customer_cannot_process(self, client, refund):
        response = client.patch(f"/refunds/{refund['id']}", json={"action": "APPROVE"}, headers=CUSTOMER)
        assert response.status_code == 403

    def test_unknown_refund(self, client):
        response = client.patch("/refunds/refund-missing", json={"action": "APPROVE"}, headers=ADMIN)
        assert response.status_code == 404

    def test_complete(self, client, refund, gateway):
        client.patch(f"/refunds/{refund['id']}", json={"action": "APPROVE"}, headers=ADMIN)

        response = client.post(f"/refunds/{refund['id']}/complete", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["status"] == "Completed"
        assert response.json()["gateway_refund_id"].startswith("rfnd_")

    def test_complete_with_gateway_down(self, client, refund, gateway):
        client.patch(f"/refunds/{refund['id']}", json={"action": "APPROVE"}, headers=ADMIN)
        gateway.configure(should_succeed=False, failure_reason="Insufficient balance")

        response = client.post(f"/refunds/{refund['id']}/complete", headers=ADMIN)

        assert response.status_code == 502
        assert response.json() == {"error": {"refund": ["Insufficient balance"]}}

    def test_complete_with_razorpay_unreachable(self, client, refund):
        client.patch(f"/refunds/{refund['id']}", json={"action": "APPROVE"}, headers=ADMIN)
        set_gateway(
            RazorpayGateway(
                key_id="rzp_test_key",
                key_secret="rzp_test_secret",
                base_url="https://api.razorpay.test/v1",
                transport=httpx.MockTransport(_refuse_connection),
            )
        )

        response = client.post(f"/refunds/{refund['id']}/complete", headers=ADMIN)

        assert response.status_code == 502
        assert response.json() == {"error": {"refund": ["Payment gateway is unreachable"]}}
        assert client.get("/refunds?status=Approved", headers=ADMIN).json()["total"] == 1


class TestNotificationEndpoints:
    def test_customer_inbox(self, client, api_paid_order):
        data = client.get("/notifications", headers=CUSTOMER).json()

        assert data["unread"] == len(data["items"]) > 0
        assert all(item["recipient_id"] == "cust-001" for item in data["items"])
        assert client.get("/notifications", headers=OTHER_CUSTOMER).json()["items"] == []

    def test_mark_read(self, client, api_paid_order):
        notification_id = client.get("/notifications", headers=CUSTOMER).json()["items"][0]["id"]

        response = client.patch(f"/notifications/{notification_id}/read", headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["read_at"] is not None
        assert client.patch(f"/notifications/{notification_id}/read", headers=OTHER_CUSTOMER).status_code == 404

    def test_mark_all_read(self, client, api_paid_order):
        unread = client.get("/notifications", headers=CUSTOMER).json()["unread"]

        response = client.post("/notifications/read-all", headers=CUSTOMER)

        assert response.json() == {"updated": unread}
        assert client.get("/notifications?unread_only=true", headers=CUSTOMER).json()["items"] == []

    def test_admin_reads_review_queue(self, client, refund):
        customer_view = client.get("/notifications?recipient_id=refund-review", headers=CUSTOMER).json()
        assert all(item["recipient_id"] == "cust-001" for item in customer_view["items"])

        queue = client.get("/notifications?recipient_id=refund-review", headers=ADMIN).json()
        assert [item["notification_type"] for item in queue["items"]] == ["RefundReview"]
