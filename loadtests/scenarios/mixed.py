"""Mixed storefront workload scenario.

Combines the checkout and refund journeys with weights that model a typical
day of storefront traffic. This is the recommended scenario for baseline load
testing.
"""

from loadtests.scenarios.base import ShopperUser
from loadtests.scenarios.checkout import CheckoutJourney, FailedPaymentJourney
from loadtests.scenarios.refunds import RefundJourney


class MixedWorkloadUser(ShopperUser):
    """Realistic mixed workload.

    Checkout (85%):
    - Successful checkout with a racing webhook and browser callback
    - Failed first attempt followed by a successful retry

    Refunds (15%):
    - Paid order refunded or rejected by an admin
    """

    tasks = {
        CheckoutJourney: 14,
        FailedPaymentJourney: 3,
        RefundJourney: 3,
    }
