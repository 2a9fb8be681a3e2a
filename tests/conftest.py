import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    """Tests that call configure_logging() must not leak stream bindings."""
    yield
    structlog.reset_defaults()
