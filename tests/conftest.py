"""
Pytest configuration and shared fixtures.
"""

import pytest
from unittest.mock import Mock, AsyncMock

from drugreport.llm import GenerativeService
from drugreport.medical_apis import MedicalAPIClient
from drugreport.models import RegistryRecord


@pytest.fixture
def make_response():
    """Factory for mock httpx responses."""
    def _make(payload=None, status_code=200):
        response = Mock()
        response.status_code = status_code
        response.json.return_value = payload
        return response
    return _make


@pytest.fixture
def registry_payload():
    """Greenbook datatable response with two paracetamol products."""
    return {
        "draw": 1,
        "recordsTotal": 3,
        "recordsFiltered": 3,
        "data": [
            {
                "sn": "1",
                "product_name": "Emzor Paracetamol Tablets",
                "registration_number": "04-0123",
                "holder": "Emzor Pharmaceutical Ind. Ltd",
                "active_ingredients": "Paracetamol 500mg BP",
            },
            {
                "sn": "2",
                "product_name": "Panadol Extra",
                "registration_number": "A4-5678",
                "holder": "GSK",
                "active_ingredients": "Paracetamol 500mg\r<br />Caffeine 65mg",
            },
            {
                "sn": "3",
                "product_name": "Amlodipine Tablets",
                "registration_number": "B4-9999",
                "holder": "Someone",
                "active_ingredients": "Amlodipine (as Besylate) 5mg",
            },
        ],
    }


@pytest.fixture
def openfda_payload():
    """openFDA label response for paracetamol."""
    return {
        "results": [
            {"adverse_reactions": ["Nausea", "Liver damage"]},
            {"adverse_reactions": ["Nausea"], "warnings": ["Liver warning"]},
            {"warnings": ["Do not exceed the recommended dose.", "Stop use if rash occurs."]},
            {"openfda": {"generic_name": ["ACETAMINOPHEN"]}},
        ]
    }


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient."""
    return AsyncMock()


@pytest.fixture
def api_client(mock_http_client):
    """Medical API client backed by the mock HTTP client."""
    return MedicalAPIClient(http_client=mock_http_client)


@pytest.fixture
def mock_medical_api_client():
    """Mock medical API client for pipeline tests."""
    client = AsyncMock(spec=MedicalAPIClient)
    client.search_registry.return_value = [
        RegistryRecord(
            product_name="Emzor Paracetamol Tablets",
            registration_number="04-0123",
            raw_ingredient_text="Paracetamol 500mg BP",
        )
    ]
    client.search_adverse_events.return_value = ["Nausea", "Liver damage"]
    return client


@pytest.fixture
def mock_generative_service():
    """Generative service whose calls always fail (returns None)."""
    service = Mock(spec=GenerativeService)
    service.available = False
    service.run = AsyncMock(return_value=None)
    return service


@pytest.fixture
def mock_openai_client():
    """Mock AsyncOpenAI client returning a configurable JSON message."""
    client = Mock()
    client.chat.completions.create = AsyncMock()

    def set_content(content):
        message = Mock()
        message.content = content
        choice = Mock()
        choice.message = message
        client.chat.completions.create.return_value = Mock(choices=[choice])

    client.set_content = set_content
    return client


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
