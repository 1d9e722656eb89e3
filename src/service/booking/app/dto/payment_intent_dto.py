from decimal import Decimal

import attrs
from uuid_utils import UUID


@attrs.frozen
class PaymentIntent:
    booking_id: UUID
    provider_order_id: str
    amount: Decimal
    currency: str
