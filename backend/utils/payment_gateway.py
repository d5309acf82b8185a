# backend/utils/payment_gateway.py
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class ChargeResult:
    success: bool
    transaction_id: Optional[str] = None
    message: str = ""


class SimulatedGateway:
    """Stand-in for a card/UPI processor. No network calls are made."""

    def __init__(self, currency: str = "INR"):
        self.currency = currency

    def charge(self, order_number: str, amount, method: str, succeed: bool = True) -> ChargeResult:
        # The caller decides the outcome so checkout failures can be exercised
        if not succeed:
            logger.info("Simulated %s charge declined for %s (%s %s)", method, order_number, amount, self.currency)
            return ChargeResult(success=False, message="Payment declined")

        transaction_id = f"SIM-{uuid.uuid4().hex[:12].upper()}"
        logger.info("Simulated %s charge %s for %s (%s %s)", method, transaction_id, order_number, amount, self.currency)
        return ChargeResult(success=True, transaction_id=transaction_id, message="Payment captured")


payment_gateway = SimulatedGateway()
