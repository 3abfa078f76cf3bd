"""
Tests for odata_client.core.response.
"""

import pytest

from odata_client.core.exceptions import ResponseParseError

from conftest import make_response


class TestEntities:
    """Tests for reading entities from a body."""

    def test_v4_collection(self, people_payload):
        response = make_response(people_payload)
        assert [p["UserName"] for p in response] == ["russellwhyte", "scottketchum"]
        assert len(response) == 2

    def test_v2_collection(self, people_v2_payload):
        response = make_response(people_v2_payload)
        assert len(response.entities()) == 2
        assert response.total_count == 2
        assert response.next_link is None

    def test_single_entity(self):
        response = make_response({"@odata.context": "x", "UserName": "russellwhyte"})
        assert response.first()["UserName"] == "russellwhyte"

    def test_v2_single_entity(self):
        response = make_response({"d": {"UserName": "russellwhyte"}})
        assert response.entities() == [{"UserName": "russellwhyte"}]

    def test_empty_body(self):
        response = make_response(b"", status=204)
        assert response.is_empty()
        assert response.entities() == []
        assert response.first() is None

    def test_invalid_json(self):
        response = make_response("<html>oops</html>")
        assert not response.is_empty()
        assert response.get_raw_body() == "<html>oops</html>"
        with pytest.raises(ResponseParseError):
            response.entities()

    def test_scalar_body(self):
        with pytest.raises(ResponseParseError):
            make_response("42").entities()


class TestPagingMetadata:
    """Tests for next links and counts."""

    def test_next_link(self, people_payload):
        people_payload["@odata.nextLink"] = "https://x/svc/People?$skiptoken=2"
        assert make_response(people_payload).next_link == "https://x/svc/People?$skiptoken=2"

    def test_v2_next_link(self):
        body = {"d": {"results": [], "__next": "https://x/svc/People?$skiptoken=2"}}
        assert make_response(body).next_link == "https://x/svc/People?$skiptoken=2"

    def test_total_count(self, people_payload):
        people_payload["@odata.count"] = 20
        assert make_response(people_payload).total_count == 20

    def test_no_total_count(self, people_payload):
        assert make_response(people_payload).total_count is None


class TestGetId:
    """Tests for reading the id of a created entity."""

    def test_body_id(self):
        assert make_response({"ID": 7}).get_id() == 7
        assert make_response({"id": "abc"}).get_id() == "abc"

    def test_entity_id_header(self):
        response = make_response(b"", 204, {"OData-EntityId": "https://x/svc/People('abc')"})
        assert response.get_id() == "abc"

    def test_location_header(self):
        response = make_response(b"", 201, {"Location": "https://x/svc/Orders(42)"})
        assert response.get_id() == 42

    def test_quoted_key_unescaped(self):
        response = make_response(b"", 204, {"OData-EntityId": "https://x/svc/People('O''Brien')"})
        assert response.get_id() == "O'Brien"

    def test_no_id(self):
        assert make_response(b"", 204).get_id() is None
