"""
Payment Service Interface

Checkout charges the order total (tip included) against the customer's
saved payment method. Cancelling a charged order refunds it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ChargeResult:
    """
    Outcome of charging an order.

    Attributes:
        approved: Whether the money was taken
        reference: Provider id of the charge, kept on the order for refunds
        amount: Dollars charged, 0 when declined
        decline_code: Machine-readable reason for a decline
        decline_message: Reason shown in logs
    """
    approved: bool
    reference: Optional[str] = None
    amount: float = 0.0
    decline_code: Optional[str] = None
    decline_message: Optional[str] = None

    @classmethod
    def declined(cls, code: str, message: str) -> "ChargeResult":
        return cls(approved=False, decline_code=code, decline_message=message)


@dataclass(frozen=True)
class RefundResult:
    approved: bool
    reference: Optional[str] = None
    amount: float = 0.0
    error: Optional[str] = None


class BasePaymentService(ABC):
    """
    Abstract base class for payment providers.

    Example:
        >>> payment = get_payment_service(settings)
        >>> result = await payment.charge(32.54, "pm_card_visa", description="Tony's Pizzeria")
        >>> result.approved
        True
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    async def charge(
        self,
        amount: float,
        payment_method_id: str,
        description: Optional[str] = None,
    ) -> ChargeResult:
        """
        Charge a saved payment method.

        Declines are returned, not raised; the caller decides how to
        surface them.
        """
        pass

    @abstractmethod
    async def refund(self, charge_reference: str, amount: Optional[float] = None) -> RefundResult:
        """
        Give back all or part of a previous charge.

        Args:
            charge_reference: ``ChargeResult.reference`` of the charge
            amount: Dollars to refund, None for whatever is left
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass
