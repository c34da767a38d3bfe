from __future__ import annotations

import pytest

from helpers import FakeContentsClient


@pytest.fixture
def fake_client() -> FakeContentsClient:
    return FakeContentsClient()
