from prometheus_client import Counter, Gauge, Histogram


class BookingMetrics:
    """Inventory and booking flow metrics exposed on /metrics."""

    def __init__(self) -> None:
        self.reservations = Counter(
            'inventory_reservations_total',
            'Reservation attempts by outcome',
            ['result'],  # reserved / insufficient / not_bookable
        )

        self.released_tickets = Counter(
            'inventory_released_tickets_total',
            'Tickets returned to inventory',
            ['reason'],  # payment_failed / cancelled / expired
        )

        self.active_holds = Gauge(
            'inventory_active_holds',
            'Reservation tokens currently pending',
        )

        self.booking_outcomes = Counter(
            'booking_outcomes_total',
            'Booking attempts by terminal state',
            ['state'],
        )

        self.payment_verification_duration = Histogram(
            'payment_verification_duration_seconds',
            'Time spent waiting on the payment provider to verify a payment',
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
        )

    def record_reservation(self, *, result: str) -> None:
        self.reservations.labels(result=result).inc()

    def record_release(self, *, reason: str, quantity: int) -> None:
        self.released_tickets.labels(reason=reason).inc(quantity)

    def record_booking_outcome(self, *, state: str) -> None:
        self.booking_outcomes.labels(state=state).inc()


# Global metrics instance
metrics = BookingMetrics()
