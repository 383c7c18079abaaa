"""Tests for user administration: approval, status changes, soft delete and export."""

import csv
import io
from datetime import date, datetime
from unittest.mock import patch

import pytest

from outleads.models import AuditLog, AuditSeverity, Campaign, Role, User, UserStatus
from outleads.services.domain_auth import DomainAuthError


class TestUserListing:

    def test_soft_deleted_users_are_hidden_from_list(self, client, db_session, admin_user, make_user,
                                                     auth_headers):
        kept = make_user(Role.AGENT)
        gone = make_user(Role.AGENT, status=UserStatus.DELETED)

        response = client.get('/api/admin/users', headers=auth_headers(admin_user))

        ids = {user['id'] for user in response.get_json()['data']}
        assert kept.id in ids
        assert gone.id not in ids

    def test_deleted_listing_shows_only_deleted(self, client, admin_user, make_user, auth_headers):
        gone = make_user(Role.AGENT, status=UserStatus.DELETED)

        response = client.get('/api/admin/users/deleted', headers=auth_headers(admin_user))

        assert [user['id'] for user in response.get_json()['data']] == [gone.id]

    def test_filter_by_role(self, client, admin_user, make_user, auth_headers):
        make_user(Role.AGENT)
        bss = make_user(Role.BSS)

        response = client.get('/api/admin/users?role=BSS', headers=auth_headers(admin_user))

        assert [user['id'] for user in response.get_json()['data']] == [bss.id]

    def test_pending_users_oldest_first(self, client, admin_user, make_user, auth_headers):
        newer = make_user(Role.AGENT, status=UserStatus.PENDING, created_at=datetime(2024, 5, 2))
        older = make_user(Role.AGENT, status=UserStatus.PENDING, created_at=datetime(2024, 5, 1))

        response = client.get('/api/admin/users/pending', headers=auth_headers(admin_user))

        body = response.get_json()
        assert [user['id'] for user in body['data']] == [older.id, newer.id]
        assert body['meta'] == {'total': 2}

    def test_get_deleted_user_is_404(self, client, admin_user, make_user, auth_headers):
        gone = make_user(Role.AGENT, status=UserStatus.DELETED)

        response = client.get(f'/api/admin/users/{gone.id}', headers=auth_headers(admin_user))

        assert response.status_code == 404


class TestUserLifecycle:

    def test_soft_delete_keeps_row(self, client, db_session, admin_user, agent_user, auth_headers):
        response = client.delete(f'/api/admin/users/{agent_user.id}', headers=auth_headers(admin_user))

        assert response.status_code == 204
        db_session.expire_all()
        assert db_session.get(User, agent_user.id).status == UserStatus.DELETED

    def test_cannot_delete_self(self, client, admin_user, auth_headers):
        response = client.delete(f'/api/admin/users/{admin_user.id}', headers=auth_headers(admin_user))

        assert response.status_code == 400

    def test_restore_reactivates_deleted_user(self, client, db_session, admin_user, make_user, auth_headers):
        gone = make_user(Role.AGENT, status=UserStatus.DELETED)

        response = client.put(f'/api/admin/users/{gone.id}/restore', headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'ACTIVE'

    def test_restore_rejects_user_that_is_not_deleted(self, client, admin_user, agent_user, auth_headers):
        response = client.put(f'/api/admin/users/{agent_user.id}/restore', headers=auth_headers(admin_user))

        assert response.status_code == 400

    def test_approve_then_login_activates(self, client, db_session, admin_user, make_user, auth_headers):
        pending = make_user(Role.AGENT, status=UserStatus.PENDING, password='s3cret-pass')

        approve = client.post('/api/admin/users/approve', json={'userId': pending.id},
                              headers=auth_headers(admin_user))
        assert approve.status_code == 200
        assert approve.get_json()['data']['status'] == 'APPROVED'

        login = client.post('/api/auth/login', json={'username': pending.username, 'password': 's3cret-pass'})

        assert login.status_code == 200
        assert login.get_json()['data']['user']['status'] == 'ACTIVE'

    def test_approve_requires_pending_user(self, client, admin_user, agent_user, auth_headers):
        response = client.post('/api/admin/users/approve', json={'userId': agent_user.id},
                               headers=auth_headers(admin_user))

        assert response.status_code == 400

    def test_status_endpoint_rejects_other_statuses(self, client, admin_user, agent_user, auth_headers):
        response = client.put(f'/api/admin/users/{agent_user.id}/status', json={'status': 'PENDING'},
                              headers=auth_headers(admin_user))

        assert response.status_code == 400

    def test_rejecting_sends_notification(self, client, admin_user, make_user, auth_headers):
        pending = make_user(Role.AGENT, status=UserStatus.PENDING)

        with patch('outleads.routes.user.NotificationService') as mock_service:
            response = client.put(f'/api/admin/users/{pending.id}/status', json={'status': 'REJECTED'},
                                  headers=auth_headers(admin_user))

        assert response.status_code == 200
        mock_service.return_value.send_account_rejected.assert_called_once()


class TestUserUpdate:

    def test_supervisor_cannot_activate(self, client, supervisor_user, make_user, auth_headers):
        pending = make_user(Role.AGENT, status=UserStatus.PENDING)

        response = client.put(f'/api/admin/users/{pending.id}', json={'status': 'ACTIVE'},
                              headers=auth_headers(supervisor_user))

        assert response.status_code == 403

    def test_bss_activation_sends_email(self, client, make_user, auth_headers):
        bss = make_user(Role.BSS)
        pending = make_user(Role.AGENT, status=UserStatus.PENDING)

        with patch('outleads.routes.user.NotificationService') as mock_service:
            response = client.put(f'/api/admin/users/{pending.id}', json={'status': 'ACTIVE'},
                                  headers=auth_headers(bss))

        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'ACTIVE'
        mock_service.return_value.send_account_activated.assert_called_once()

    def test_unchanged_status_sends_nothing(self, client, admin_user, agent_user, auth_headers):
        with patch('outleads.routes.user.NotificationService') as mock_service:
            client.put(f'/api/admin/users/{agent_user.id}', json={'name': 'Renamed'},
                       headers=auth_headers(admin_user))

        mock_service.assert_not_called()

    def test_role_is_normalized(self, client, admin_user, agent_user, auth_headers):
        response = client.put(f'/api/admin/users/{agent_user.id}', json={'role': 'supervisor'},
                              headers=auth_headers(admin_user))

        assert response.get_json()['data']['role'] == 'SUPERVISOR'

    def test_unknown_role_is_rejected(self, client, admin_user, agent_user, auth_headers):
        response = client.put(f'/api/admin/users/{agent_user.id}', json={'role': 'OWNER'},
                              headers=auth_headers(admin_user))

        assert response.status_code == 400

    def test_deleted_status_is_rejected(self, client, admin_user, agent_user, auth_headers):
        response = client.put(f'/api/admin/users/{agent_user.id}', json={'status': 'DELETED'},
                              headers=auth_headers(admin_user))

        assert response.status_code == 400

    @pytest.mark.parametrize('field', ['email', 'role', 'status'])
    def test_null_for_required_field_is_validation_error(self, client, admin_user, agent_user, auth_headers,
                                                         field):
        response = client.put(f'/api/admin/users/{agent_user.id}', json={field: None},
                              headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.get_json()['message'] == f'{field}: may not be null'

    def test_duplicate_email_is_conflict(self, client, admin_user, agent_user, auth_headers):
        response = client.put(f'/api/admin/users/{agent_user.id}', json={'email': admin_user.email},
                              headers=auth_headers(admin_user))

        assert response.status_code == 409


class TestUserExport:

    @pytest.fixture
    def export(self, client, db_session, make_user, admin_user, sample_sbu, auth_headers):
        agent = make_user(Role.AGENT, name='Jane "JJ" Doe', sbu_id=sample_sbu.id)
        make_user(Role.AGENT, status=UserStatus.DELETED)
        db_session.add(Campaign(campaign_name='C1', organization_name='Acme', unique_link='c1link',
                                created_by_id=admin_user.id,
                                assigned_to_id=agent.id))
        db_session.commit()
        infosec = make_user(Role.INFOSEC)
        response = client.get('/api/admin/users/export', headers=auth_headers(infosec))
        return agent, response

    def test_export_is_quoted_csv_attachment(self, export):
        _, response = export

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        expected = f'attachment; filename="nexus-users-export-{date.today().isoformat()}.csv"'
        assert response.headers['Content-Disposition'] == expected

        lines = response.get_data(as_text=True).split('\n')
        assert lines[0] == ('"Username","Name","Email","SBU","Role","Status",'
                            '"Created Date","Last Login","Campaigns Count"')

    def test_export_rows(self, export):
        agent, response = export

        rows = list(csv.reader(io.StringIO(response.get_data(as_text=True))))
        by_username = {row[0]: row for row in rows[1:]}
        assert len(rows) == 4  # header, admin, agent, infosec
        row = by_username[agent.username]
        assert row[1] == 'Jane "JJ" Doe'
        assert row[3] == 'Enterprise'
        assert row[7] == 'Never'
        assert row[8] == '1'

    def test_agent_cannot_export(self, client, agent_user, auth_headers):
        response = client.get('/api/admin/users/export', headers=auth_headers(agent_user))

        assert response.status_code == 403

    def test_export_is_audited(self, export):
        entry = AuditLog.query.filter_by(action='DATA_EXPORT').one()

        assert entry.resource_type == 'USER'
        assert entry.severity == AuditSeverity.HIGH
        assert entry.details == {'format': 'csv', 'rows': 3}


class TestUserAuditTrail:

    def test_status_change_is_recorded_with_actor(self, client, admin_user, make_user, auth_headers):
        pending = make_user(Role.AGENT, status=UserStatus.PENDING)

        with patch('outleads.routes.user.NotificationService'):
            client.put(f'/api/admin/users/{pending.id}/status', json={'status': 'REJECTED'},
                       headers=auth_headers(admin_user))

        entry = AuditLog.query.filter_by(action='USER_STATUS_CHANGED').one()
        assert entry.user_id == admin_user.id
        assert entry.resource_id == pending.id
        assert entry.details == {'from': 'PENDING', 'to': 'REJECTED'}

    def test_delete_and_restore_are_recorded(self, client, admin_user, agent_user, auth_headers):
        client.delete(f'/api/admin/users/{agent_user.id}', headers=auth_headers(admin_user))
        client.put(f'/api/admin/users/{agent_user.id}/restore', headers=auth_headers(admin_user))

        actions = {entry.action: entry for entry in AuditLog.query.all()}
        assert actions['USER_DELETED'].severity == AuditSeverity.HIGH
        assert actions['USER_RESTORED'].resource_id == agent_user.id


class TestDirectorySearch:

    @pytest.fixture
    def directory(self):
        with patch('outleads.routes.user.DomainAuthClient') as mock_client:
            instance = mock_client.return_value
            instance.configured = True
            yield instance

    def test_returns_directory_record(self, client, admin_user, auth_headers, directory):
        directory.search_user.return_value = {'username': 'nomsa', 'email_': 'nomsa@corp.example'}

        response = client.get('/api/admin/users/search?username=nomsa', headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert response.get_json()['data'] == [{'username': 'nomsa', 'email_': 'nomsa@corp.example'}]
        directory.search_user.assert_called_once_with('nomsa')

    def test_username_is_required(self, client, admin_user, auth_headers, directory):
        response = client.get('/api/admin/users/search', headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Username is required'

    def test_unknown_username_is_empty(self, client, admin_user, auth_headers, directory):
        directory.search_user.side_effect = DomainAuthError("Directory request failed", status_code=404)

        response = client.get('/api/admin/users/search?username=ghost', headers=auth_headers(admin_user))

        assert response.get_json()['data'] == []

    def test_directory_outage_is_bad_gateway(self, client, admin_user, auth_headers, directory):
        directory.search_user.side_effect = DomainAuthError("Directory service is unavailable")

        response = client.get('/api/admin/users/search?username=nomsa', headers=auth_headers(admin_user))

        assert response.status_code == 502

    def test_unconfigured_directory_is_unavailable(self, client, admin_user, auth_headers):
        response = client.get('/api/admin/users/search?username=nomsa', headers=auth_headers(admin_user))

        assert response.status_code == 503
        assert response.get_json()['error'] == 'SERVICE_UNAVAILABLE'

    def test_supervisors_cannot_search(self, client, supervisor_user, auth_headers, directory):
        response = client.get('/api/admin/users/search?username=nomsa', headers=auth_headers(supervisor_user))

        assert response.status_code == 403
