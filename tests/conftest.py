"""
Pytest configuration and shared fixtures.
"""

import json

import pytest
from unittest.mock import Mock

from odata_client.core.response import ODataResponse
from odata_client.query.builder import Builder
from odata_client.query.grammar import Grammar


def make_response(body, status=200, headers=None):
    """Build an ODataResponse from a dict/list (JSON encoded) or a raw str/bytes body."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    return ODataResponse(None, body, status, headers or {})


@pytest.fixture
def builder():
    """A client-less builder targeting People."""
    return Builder().from_("People")


@pytest.fixture
def mock_client():
    """A mock ODataClient that hands out real builders."""
    client = Mock()
    client.query_grammar = Grammar()
    client.query = Mock(side_effect=lambda: Builder(client, client.query_grammar))
    client.from_ = Mock(side_effect=lambda es: Builder(client, client.query_grammar).from_(es))
    return client


@pytest.fixture
def people_payload():
    """Sample OData v4 collection response."""
    return {
        "@odata.context": "https://services.example.com/$metadata#People",
        "value": [
            {"UserName": "russellwhyte", "FirstName": "Russell", "LastName": "Whyte", "Age": 34},
            {"UserName": "scottketchum", "FirstName": "Scott", "LastName": "Ketchum", "Age": 29},
        ],
    }


@pytest.fixture
def people_v2_payload():
    """Sample OData v2 collection response."""
    return {
        "d": {
            "results": [
                {"UserName": "russellwhyte", "FirstName": "Russell"},
                {"UserName": "scottketchum", "FirstName": "Scott"},
            ],
            "__count": "2",
            "__next": None,
        }
    }
