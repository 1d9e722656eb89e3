from enum import StrEnum


class PaymentStatus(StrEnum):
    CREATED = 'created'
    AUTHORIZED = 'authorized'
    CAPTURED = 'captured'
    FAILED = 'failed'
    REFUNDED = 'refunded'
