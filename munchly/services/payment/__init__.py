"""
Payment Service

    from munchly.services.payment import get_payment_service

    payment = get_payment_service(settings)
    result = await payment.charge(29.99, "pm_card_visa")

There is no card processor integration; every mode gets the mock, and
staging/production say so in the log.
"""

import logging
from typing import Optional

from munchly.core.config import Settings, get_settings
from munchly.services.payment.base import BasePaymentService, ChargeResult, RefundResult
from munchly.services.payment.mock import MockPaymentService

logger = logging.getLogger(__name__)


def get_payment_service(settings: Optional[Settings] = None) -> BasePaymentService:
    settings = settings or get_settings()

    if settings.use_real_services:
        logger.warning(
            f"Payment Service: no processor for {settings.env_mode.value}, using MockPaymentService"
        )
    else:
        logger.info("Payment Service: Using MockPaymentService (development mode)")

    return MockPaymentService(
        failure_rate=settings.mock_payment_failure_rate,
        min_latency=settings.mock_min_latency,
        max_latency=settings.mock_max_latency,
    )


__all__ = [
    "get_payment_service",
    "BasePaymentService",
    "ChargeResult",
    "MockPaymentService",
    "RefundResult",
]
