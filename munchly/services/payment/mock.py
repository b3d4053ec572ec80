"""
Mock Payment Provider

Keeps an in-memory ledger of charges so refunds can be checked against
what was actually taken. Approves everything unless a failure rate is set
or the ``pm_card_declined`` test method is used.
"""

import asyncio
import logging
import random
import uuid
from typing import Dict, Optional

from munchly.services.payment.base import BasePaymentService, ChargeResult, RefundResult

logger = logging.getLogger(__name__)

DECLINED_TEST_METHOD = "pm_card_declined"

DECLINES = [
    ("card_declined", "The card was declined"),
    ("insufficient_funds", "The card has insufficient funds"),
    ("expired_card", "The card has expired"),
]


class MockPaymentService(BasePaymentService):
    """
    In-process payment provider.

    Args:
        failure_rate: Share of charges declined at random (0.0-1.0)
        min_latency: Lower bound of the simulated round trip, seconds
        max_latency: Upper bound of the simulated round trip, seconds
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.2,
        max_latency: float = 0.6,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max(min_latency, max_latency)

        # charge reference -> dollars still refundable
        self._refundable: Dict[str, float] = {}

        logger.info(f"MockPaymentService ready (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)

    async def charge(
        self,
        amount: float,
        payment_method_id: str,
        description: Optional[str] = None,
    ) -> ChargeResult:
        if amount <= 0:
            return ChargeResult.declined("invalid_amount", "Charge amount must be positive")
        if not payment_method_id:
            return ChargeResult.declined("missing_payment_method", "No payment method on file")

        await self._simulate_latency()

        if payment_method_id == DECLINED_TEST_METHOD:
            code, message = DECLINES[0]
            return ChargeResult.declined(code, message)
        if random.random() < self.failure_rate:
            code, message = random.choice(DECLINES)
            logger.warning(f"Mock: declined ${amount:.2f} on {payment_method_id} ({code})")
            return ChargeResult.declined(code, message)

        reference = f"pay_mock_{uuid.uuid4().hex[:16]}"
        self._refundable[reference] = amount
        logger.info(f"Mock: charged ${amount:.2f} for {description or 'order'} ({reference})")
        return ChargeResult(approved=True, reference=reference, amount=amount)

    async def refund(self, charge_reference: str, amount: Optional[float] = None) -> RefundResult:
        await self._simulate_latency()

        remaining = self._refundable.get(charge_reference)
        if remaining is None:
            return RefundResult(approved=False, error=f"Unknown charge {charge_reference}")

        amount = remaining if amount is None else amount
        if amount <= 0 or amount > remaining + 0.005:
            return RefundResult(
                approved=False,
                error=f"Cannot refund ${amount:.2f}, ${remaining:.2f} left on {charge_reference}",
            )

        self._refundable[charge_reference] = round(remaining - amount, 2)
        reference = f"re_mock_{uuid.uuid4().hex[:16]}"
        logger.info(f"Mock: refunded ${amount:.2f} of {charge_reference} ({reference})")
        return RefundResult(approved=True, reference=reference, amount=amount)

    def refundable(self, charge_reference: str) -> float:
        """Dollars still refundable on a charge, 0 for unknown charges."""
        return self._refundable.get(charge_reference, 0.0)

    async def health_check(self) -> bool:
        return True
