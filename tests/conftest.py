# tests/conftest.py
import io

import pytest

from combinator.utils.trace import setup_trace_logger


@pytest.fixture(autouse=True)
def quiet_trace_logger():
    """Each run rebinds the trace handler; drop it after every test so no stale capture stream is kept."""
    yield
    setup_trace_logger(False, stream=io.StringIO())
