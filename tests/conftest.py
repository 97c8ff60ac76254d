from datetime import datetime

import pytest


BASE = datetime(2024, 6, 15, 9, 0)


@pytest.fixture
def base():
    return BASE


@pytest.fixture
def settings():
    return {"RELATIVE_BASE": BASE}
