from __future__ import annotations

import logging
from pathlib import Path

import pytest

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture(autouse=True)
def _propagate_sqladapter_logs() -> None:
    """Keep library records visible to caplog even if a test reconfigured logging."""
    logging.getLogger("sqladapter").propagate = True
