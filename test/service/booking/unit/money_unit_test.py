from decimal import Decimal

import pytest

from src.platform.exception.exceptions import ValidationError
from src.service.booking.domain.value_object.money import (
    compute_total,
    from_minor_units,
    to_minor_units,
    to_money,
)


pytestmark = pytest.mark.unit


class TestToMoney:
    @pytest.mark.parametrize(
        'raw, expected',
        [
            ('10', Decimal('10.00')),
            (Decimal('10.005'), Decimal('10.01')),
            (Decimal('10.004'), Decimal('10.00')),
            (0.1, Decimal('0.10')),
            (7, Decimal('7.00')),
        ],
    )
    def test_quantizes_to_two_places_half_up(self, raw, expected):
        assert to_money(raw) == expected
        assert to_money(raw).as_tuple().exponent == -2

    @pytest.mark.parametrize('raw', ['abc', 'NaN', 'Infinity', None])
    def test_rejects_non_numeric(self, raw):
        with pytest.raises(ValidationError):
            to_money(raw)


class TestComputeTotal:
    def test_total_is_price_times_quantity(self):
        assert compute_total(Decimal('499.99'), 3) == Decimal('1499.97')

    def test_free_event_total_is_zero(self):
        assert compute_total(Decimal('0'), 5) == Decimal('0.00')

    def test_total_has_no_float_drift(self):
        # 0.1 * 3 in float is 0.30000000000000004
        assert compute_total(Decimal('0.10'), 3) == Decimal('0.30')


class TestMinorUnits:
    def test_to_paise(self):
        assert to_minor_units(Decimal('1499.97')) == 149997

    def test_from_paise(self):
        assert from_minor_units(50000) == Decimal('500.00')
