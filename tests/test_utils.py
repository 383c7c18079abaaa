"""
Unit tests for Utility Functions.

This module tests the error envelopes, the exception taxonomy and the
global error handlers.
"""

from flask import Blueprint

from outleads.utils.error_handling import (
    ERROR_CODES,
    STATUS_CODES,
    Conflict,
    ExternalServiceError,
    Forbidden,
    InternalError,
    create_error_response,
    create_success_response,
    handle_internal_error,
    not_found,
)


class TestErrorCodes:
    """Test error code constants."""

    def test_every_error_code_has_a_status(self):
        assert set(ERROR_CODES) == set(STATUS_CODES)

    def test_taxonomy_status_codes(self):
        assert Forbidden().status_code == 403
        assert Conflict('x').status_code == 409
        assert ExternalServiceError().status_code == 502
        assert InternalError().status_code == 500


class TestEnvelopes:
    """Test response envelope helpers."""

    def test_error_envelope(self, app):
        response, status = create_error_response('NOT_FOUND', 'Lead not found')

        assert status == 404
        assert response.get_json() == {'error': 'NOT_FOUND', 'message': 'Lead not found'}

    def test_unknown_code_falls_back_to_internal_error(self, app):
        response, status = create_error_response('TEAPOT', 'short and stout')

        assert status == 500
        assert response.get_json()['error'] == 'INTERNAL_ERROR'

    def test_success_envelope_with_and_without_meta(self, app):
        plain, _ = create_success_response({'id': 1})
        paged, status = create_success_response([], {'total': 0}, status_code=201)

        assert plain.get_json() == {'data': {'id': 1}}
        assert paged.get_json() == {'data': [], 'meta': {'total': 0}}
        assert status == 201

    def test_not_found_message(self):
        assert not_found('Campaign', 'abc').message == 'Campaign not found with id: abc'
        assert not_found('Campaign').message == 'Campaign not found'

    def test_internal_error_hides_details(self, app, caplog):
        response, status = handle_internal_error(RuntimeError('secret stack detail'), 'lead import', user_id='u1')

        assert status == 500
        assert 'secret stack detail' not in response.get_json()['message']
        assert 'user_id=u1' in caplog.text


class TestErrorHandlers:
    """Test global error handlers."""

    def test_unknown_route_is_404_envelope(self, client):
        response = client.get('/api/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'NOT_FOUND'

    def test_wrong_method_is_405_envelope(self, client):
        response = client.delete('/api/health')

        assert response.status_code == 405
        assert response.get_json()['error'] == 'METHOD_NOT_ALLOWED'

    def test_non_json_body_is_validation_error(self, client, admin_user, auth_headers):
        response = client.post('/api/admin/sectors', data='not json', headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'VALIDATION_ERROR'

    def test_unhandled_exception_is_generic_500(self):
        from outleads.main import create_app

        app = create_app('testing')
        boom = Blueprint('boom', __name__)

        @boom.route('/boom')
        def explode():
            raise RuntimeError('kaboom')

        app.register_blueprint(boom)
        with app.app_context():
            response = app.test_client().get('/boom')

        assert response.status_code == 500
        assert response.get_json() == {
            'error': 'INTERNAL_ERROR',
            'message': 'An unexpected error occurred during request processing',
        }
