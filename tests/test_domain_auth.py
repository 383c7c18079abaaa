"""Tests for the corporate directory client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from outleads.services.domain_auth import DomainAuthClient, DomainAuthError


def _response(payload=None, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


@pytest.fixture
def directory(app):
    return DomainAuthClient(base_url='http://directory.test/', timeout=3)


class TestDomainAuthClient:

    def test_unconfigured_by_default_in_tests(self, app):
        assert DomainAuthClient().configured is False

    def test_search_user_escapes_username(self, directory):
        with patch('outleads.services.domain_auth.requests.request',
                   return_value=_response({'username': 'j smith'})) as request:
            record = directory.search_user('j smith')

        assert record == {'username': 'j smith'}
        request.assert_called_once_with('GET', 'http://directory.test/api/allusers/j%20smith', timeout=3)

    def test_http_error_keeps_status(self, directory):
        with patch('outleads.services.domain_auth.requests.request', return_value=_response(status=404)):
            with pytest.raises(DomainAuthError) as exc_info:
                directory.search_user('ghost')

        assert exc_info.value.status_code == 404

    def test_connection_failure(self, directory):
        with patch('outleads.services.domain_auth.requests.request',
                   side_effect=requests.exceptions.ConnectionError('refused')):
            with pytest.raises(DomainAuthError, match='unavailable'):
                directory.search_user('nomsa')
