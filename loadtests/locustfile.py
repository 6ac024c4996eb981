"""Storefront Load Testing: Locust entry point.

Imports every user class so Locust discovers them. Run one scenario with
Locust's class selection.

The gateway-side steps sign webhooks and browser callbacks with
``RAZORPAY_KEY_SECRET``/``RAZORPAY_WEBHOOK_SECRET``, so the target server must
run with ``PAYMENT_GATEWAY=fake`` and the same secrets.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Mixed workload only:
    locust -f loadtests/locustfile.py MixedWorkloadUser

    # Duplicate webhook storm:
    locust -f loadtests/locustfile.py WebhookStormUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py MixedWorkloadUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.mixed import MixedWorkloadUser  # noqa: F401
from loadtests.scenarios.stress import OversellUser, WebhookStormUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    try:
        health = requests.get(f"{environment.host}/health", timeout=5).json()
        print(f"[LOADTEST] Health: {health}")
    except (requests.RequestException, ValueError) as e:
        print(f"[LOADTEST] Health check failed: {e}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the operations inbox size: each entry is a shortfall or late-payment alert."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.get(
            f"{environment.host}/notifications",
            params={"recipient_id": "operations"},
            headers={"X-User-Id": "admin-loadtest", "X-User-Role": "admin"},
            timeout=5,
        )
        alerts = resp.json().get("items", [])
        print(f"[LOADTEST] Operations alerts raised: {len(alerts)}\n")
    except (requests.RequestException, ValueError) as e:
        print(f"[LOADTEST] Could not fetch operations inbox: {e}\n")
