"""Tests for the HTTP credential issuer and search backend."""

from unittest import mock

import pytest
import requests

from pyqt_recordlink.clients import AlgoliaSearchBackend, RunServiceCredentialIssuer
from pyqt_recordlink.protocols import SearchBackendError, ServiceError


class MockResponse:
    def __init__(self, json_data=None, status_code=200, reason="OK", text="{}"):
        self.json_data = json_data
        self.status_code = status_code
        self.reason = reason
        self.text = text

    def json(self):
        if self.json_data is None:
            raise ValueError("No JSON object could be decoded")
        return self.json_data


REQUEST = "pyqt_recordlink.clients._http.requests.request"


def test_issue_app_identifier():
    issuer = RunServiceCredentialIssuer("https://run.example/", auth_token="tok")
    reply = MockResponse({"success": True, "appId": "APP1"})
    with mock.patch(REQUEST, return_value=reply) as req:
        result = issuer.issue_app_identifier()

    assert result.success
    assert result.app_id == "APP1"
    args, kwargs = req.call_args
    assert args == ("GET", "https://run.example/algoliaAppId")
    assert kwargs["headers"] == {"Authorization": "Bearer tok"}


def test_issue_app_identifier_refused():
    issuer = RunServiceCredentialIssuer("https://run.example")
    reply = MockResponse({"success": False, "message": "Algolia is not setup"})
    with mock.patch(REQUEST, return_value=reply):
        result = issuer.issue_app_identifier()
    assert not result.success
    assert result.message == "Algolia is not setup"


def test_issue_search_secret():
    issuer = RunServiceCredentialIssuer("https://run.example")
    with mock.patch(REQUEST, return_value=MockResponse({"key": "k1"})) as req:
        result = issuer.issue_search_secret("people")

    assert result.secret == "k1"
    args, kwargs = req.call_args
    assert args == ("POST", "https://run.example/algoliaSearchKey")
    assert kwargs["json"] == {"params": ["people"]}


def test_http_errors_become_service_errors():
    issuer = RunServiceCredentialIssuer("https://run.example")
    with mock.patch(REQUEST, return_value=MockResponse({}, status_code=500, reason="Boom")):
        with pytest.raises(ServiceError) as exc:
            issuer.issue_search_secret("people")
    assert exc.value.status == 500

    with mock.patch(REQUEST, side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ServiceError):
            issuer.issue_app_identifier()

    html = MockResponse(None, text="<html><body>login</body></html>")
    with mock.patch(REQUEST, return_value=html):
        with pytest.raises(ServiceError, match="HTML returned"):
            issuer.issue_app_identifier()


def test_algolia_query():
    backend = AlgoliaSearchBackend(hits_per_page=20)
    reply = MockResponse({"hits": [{"objectID": "5", "name": "Bob"}], "nbHits": 12})
    with mock.patch(REQUEST, return_value=reply) as req:
        response = backend.query("people", "team:red", "k1", "bob", app_id="APP1")

    assert response.hits == [{"objectID": "5", "name": "Bob"}]
    assert response.total_count == 12
    assert not response.loading

    args, kwargs = req.call_args
    assert args == ("POST", "https://app1-dsn.algolia.net/1/indexes/people/query")
    assert kwargs["headers"] == {"X-Algolia-Application-Id": "APP1", "X-Algolia-API-Key": "k1"}
    assert kwargs["json"] == {"query": "bob", "filters": "team:red", "hitsPerPage": 20}


def test_algolia_query_without_filters_or_app_id():
    backend = AlgoliaSearchBackend()
    with mock.patch(REQUEST, return_value=MockResponse({"hits": []})) as req:
        response = backend.query("people", "", "k1", "", app_id="APP1")
    assert req.call_args[1]["json"] == {"query": ""}
    assert response.total_count == 0

    with pytest.raises(SearchBackendError):
        backend.query("people", "", "k1", "")
