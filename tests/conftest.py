# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from rehabpro.api.http import app  # ensures imports resolve; run tests from repo root
from rehabpro.domain.settings import CalculationSettings


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def default_settings():
    return CalculationSettings()
