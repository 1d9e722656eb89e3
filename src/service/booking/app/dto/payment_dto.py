from decimal import Decimal
from typing import Optional

import attrs


@attrs.frozen
class PaymentOrder:
    """Order created at the payment provider; `amount` is in major units."""

    id: str
    amount: Decimal
    currency: str
    receipt: str
    status: str = 'created'


@attrs.frozen
class PaymentVerification:
    verified: bool
    provider_payment_id: str
    status: Optional[str] = None
    reason: Optional[str] = None
