"""
Featured-listing checkout via Stripe-hosted payment pages.
"""
import logging
from typing import Optional

from pydantic import BaseModel

from ..client.functions import CallableFunctions
from ..config import StripeConfig, get_config
from ..errors import CallableFunctionError, CheckoutError


logger = logging.getLogger(__name__)

# (minimum amount, label), highest first
TIERS: tuple[tuple[int, str], ...] = (
    (1000, "Premium"),
    (500, "High"),
    (100, "Medium"),
)
DEFAULT_TIER = "Standard"


def tier_for(amount: float) -> str:
    """Placement tier label for a featured payment."""
    for threshold, label in TIERS:
        if amount >= threshold:
            return label
    return DEFAULT_TIER


class CheckoutSession(BaseModel):
    session_id: str
    url: str
    amount: int
    tier: str


class FeaturedCheckout:
    """Creates checkout sessions through the ``createCheckoutSession`` callable."""

    def __init__(self, functions: Optional[CallableFunctions] = None, config: Optional[StripeConfig] = None):
        self.functions = functions or CallableFunctions()
        self.config = config or get_config().stripe

    def start(self, tool_id: str, amount: float) -> CheckoutSession:
        """
        Start a featured-listing payment.

        Args:
            tool_id: Listing to feature
            amount: Requested USD amount; raised to the minimum when lower

        Raises:
            CheckoutError: If the backend does not return a session
        """
        amount = max(int(amount), self.config.min_featured_amount)
        try:
            result = self.functions.create_checkout_session(tool_id, amount)
        except CallableFunctionError as e:
            logger.error(f"Checkout session failed for tool {tool_id}: {e}")
            raise CheckoutError(f"Could not start checkout: {e.message}") from e

        session_id = result.get("sessionId")
        if not session_id:
            raise CheckoutError("Checkout session response had no sessionId")

        logger.info(f"Started checkout {session_id} for tool {tool_id} (${amount})")
        return CheckoutSession(
            session_id=session_id,
            url=result.get("url") or f"{self.config.checkout_base_url}/{session_id}",
            amount=amount,
            tier=tier_for(amount),
        )
