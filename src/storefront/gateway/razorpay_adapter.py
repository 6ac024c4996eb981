"""Razorpay adapter speaking the REST API over httpx.

Authentication is HTTP basic with the key id and key secret. Amounts are
sent in paise.
"""

import httpx
import structlog

from storefront.exceptions import GatewayError
from storefront.gateway.port import GatewayOrder, PaymentGateway, RefundResult

logger = structlog.get_logger(__name__)


class RazorpayGateway(PaymentGateway):
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.key_id = key_id
        self._client = httpx.Client(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings):
        return cls(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_key_secret,
            base_url=settings.razorpay_api_url,
        )

    def _post(self, path: str, payload: dict) -> dict:
        try:
            response = self._client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("razorpay_request_rejected", path=path, status_code=exc.response.status_code)
            raise GatewayError({"gateway": [f"Gateway rejected the request ({exc.response.status_code})"]}) from exc
        except httpx.HTTPError as exc:
            logger.error("razorpay_request_failed", path=path, error=str(exc))
            raise GatewayError({"gateway": ["Payment gateway is unreachable"]}) from exc
        return response.json()

    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        body = self._post(
            "/orders",
            {"amount": amount_minor, "currency": currency, "receipt": receipt, "notes": notes},
        )
        return GatewayOrder(
            gateway_order_id=body["id"],
            amount_minor=body.get("amount", amount_minor),
            currency=body.get("currency", currency),
            receipt=body.get("receipt", receipt),
            status=body.get("status", "created"),
        )

    def create_refund(self, gateway_payment_id: str, amount_minor: int, notes: dict) -> RefundResult:
        try:
            body = self._post(f"/payments/{gateway_payment_id}/refund", {"amount": amount_minor, "notes": notes})
        except GatewayError as exc:
            reason = "; ".join(getattr(exc, "messages", {}).get("gateway", [])) or str(exc)
            return RefundResult(success=False, gateway_status="failed", failure_reason=reason)
        return RefundResult(success=True, gateway_refund_id=body["id"], gateway_status=body.get("status"))

    def close(self) -> None:
        self._client.close()
