"""
Booking flows as Gherkin scenarios (features/booking_flow.feature).

Steps live in this directory's conftest.py.
"""

import pytest
from pytest_bdd import scenarios


pytestmark = pytest.mark.integration

scenarios('features/booking_flow.feature')
