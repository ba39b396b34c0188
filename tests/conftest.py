import pytest

from csfn.csfn_registry import reset_registry


@pytest.fixture(autouse=True)
def fresh_registry():
    # Registrations made by one test must not leak into the next
    reset_registry()
    yield
    reset_registry()
