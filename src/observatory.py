"""Storefront Observatory: real-time message flow observability.

Uses Protean's built-in Observatory server for a live dashboard, Prometheus
metrics and a REST API over the storefront event pipeline (order, payment,
refund, product and notification streams).

Usage:
    uvicorn src.observatory:app --host 0.0.0.0 --port 9000
"""

from protean.server.observatory import create_observatory_app
from storefront.domain import storefront

storefront.init()

app = create_observatory_app(
    domains=[storefront],
    title="Storefront Observatory",
)
