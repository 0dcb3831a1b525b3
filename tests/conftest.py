from datetime import date

import pytest

from database import Registry
from schemas import Author

from factories import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def author():
    return Author(id="9", username="tester", avatar="🧪", karma=1, cake_day=date(2024, 1, 1))


@pytest.fixture
def registry(clock):
    return Registry.with_sample_data(clock=clock)
