"""Tests for gateway signatures and order number generation."""

import hashlib
import hmac
import re

from storefront.order.numbering import _to_base36, generate_order_number
from storefront.shared.signatures import (
    checkout_payload,
    compute_signature,
    sign_checkout,
    verify_checkout,
    verify_signature,
)

SECRET = "whsec_test"


class TestSignatures:
    def test_matches_hmac_sha256_hex(self):
        expected = hmac.new(SECRET.encode(), b'{"event":"payment.captured"}', hashlib.sha256).hexdigest()
        assert compute_signature(SECRET, b'{"event":"payment.captured"}') == expected

    def test_verify_accepts_valid_signature(self):
        body = b'{"a":1}'
        assert verify_signature(SECRET, body, compute_signature(SECRET, body))

    def test_verify_rejects_tampered_body(self):
        signature = compute_signature(SECRET, b'{"a":1}')
        assert not verify_signature(SECRET, b'{"a":2}', signature)

    def test_verify_rejects_missing_signature(self):
        assert not verify_signature(SECRET, b"{}", None)
        assert not verify_signature(SECRET, b"{}", "")

    def test_checkout_payload_format(self):
        assert checkout_payload("order_abc", "pay_xyz") == "order_abc|pay_xyz"

    def test_checkout_signature_round_trip(self):
        signature = sign_checkout(SECRET, "order_abc", "pay_xyz")
        assert verify_checkout(SECRET, "order_abc", "pay_xyz", signature)
        assert not verify_checkout(SECRET, "order_abc", "pay_other", signature)


class TestOrderNumbers:
    def test_base36(self):
        assert _to_base36(0) == "0"
        assert _to_base36(35) == "Z"
        assert _to_base36(36) == "10"

    def test_format(self):
        number = generate_order_number("ORD")
        assert re.fullmatch(r"ORD-[0-9A-Z]+-[0-9A-Z]{5}", number)

    def test_numbers_differ(self):
        numbers = {generate_order_number("ORD") for _ in range(50)}
        assert len(numbers) == 50
