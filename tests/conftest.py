import pytest

from spotgen.application.context import ResolutionContext
from tests.fixtures.catalog import FakeCatalog


@pytest.fixture
def catalog():
    """Provide an empty in-memory catalog."""
    return FakeCatalog()


@pytest.fixture
def context(catalog):
    """Provide a resolution context backed by the in-memory catalog."""
    return ResolutionContext(catalog=catalog, concurrency=5)
