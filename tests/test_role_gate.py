"""Tests for the role gate wrapping protected endpoints."""

import pytest
from flask import g, jsonify

from outleads.auth.gate import protect
from outleads.models import Role, UserStatus

CAMPAIGN_ROLES = {Role.ADMIN, Role.SUPERVISOR}


class TestAuthentication:

    def test_missing_token_is_unauthorized(self, client):
        response = client.get('/api/admin/campaigns')

        assert response.status_code == 401
        assert response.get_json() == {'error': 'UNAUTHORIZED', 'message': 'Access token is required'}

    def test_non_bearer_header_is_unauthorized(self, client, admin_user):
        response = client.get('/api/admin/campaigns', headers={'Authorization': 'Basic abc'})

        assert response.status_code == 401

    def test_invalid_token_is_unauthorized(self, client):
        response = client.get('/api/admin/campaigns', headers={'Authorization': 'Bearer nope'})

        assert response.status_code == 401
        assert response.get_json()['error'] == 'UNAUTHORIZED'

    def test_deleted_subject_is_unauthorized(self, client, db_session, admin_user, auth_headers):
        headers = auth_headers(admin_user)
        db_session.delete(admin_user)
        db_session.commit()

        response = client.get('/api/admin/campaigns', headers=headers)

        assert response.status_code == 401

    @pytest.mark.parametrize('status', [UserStatus.PENDING, UserStatus.APPROVED, UserStatus.REJECTED,
                                        UserStatus.INACTIVE, UserStatus.DELETED])
    def test_inactive_user_is_forbidden(self, client, make_user, auth_headers, status):
        user = make_user(Role.ADMIN, status=status)

        response = client.get('/api/admin/campaigns', headers=auth_headers(user))

        assert response.status_code == 403


class TestAuthorization:

    @pytest.mark.parametrize('role', sorted(set(Role) - CAMPAIGN_ROLES, key=lambda r: r.value))
    def test_role_outside_allowed_set_is_forbidden(self, client, make_user, auth_headers, role):
        response = client.get('/api/admin/campaigns', headers=auth_headers(make_user(role)))

        assert response.status_code == 403
        assert response.get_json()['message'] == 'Insufficient permissions for this operation'

    @pytest.mark.parametrize('role', sorted(CAMPAIGN_ROLES, key=lambda r: r.value))
    def test_allowed_role_reaches_handler(self, client, make_user, auth_headers, role):
        response = client.get('/api/admin/campaigns', headers=auth_headers(make_user(role)))

        assert response.status_code == 200
        assert 'data' in response.get_json()

    def test_direct_wrap_passes_identity_and_result_through(self, app, client, agent_user, auth_headers):
        def whoami():
            return jsonify({'id': g.current_user.id}), 202

        app.add_url_rule('/test/whoami', 'whoami', protect([Role.AGENT], whoami))

        response = client.get('/test/whoami', headers=auth_headers(agent_user))

        assert response.status_code == 202
        assert response.get_json() == {'id': agent_user.id}

    def test_role_names_are_accepted_case_insensitively(self):
        wrapped = protect(['admin', 'Supervisor'], lambda: None)

        assert wrapped.allowed_roles == frozenset({Role.ADMIN, Role.SUPERVISOR})

    def test_unknown_role_is_rejected_at_decoration(self):
        with pytest.raises(ValueError):
            protect(['ADMIN', 'JANITOR'])
