"""Tests for the audit log listing and the admin reports."""

from datetime import datetime

import pytest

from outleads.models import AuditLog, AuditSeverity, Campaign, Lead, Role
from outleads.services import audit
from outleads.services.audit import record_audit_event, sanitize_details


@pytest.fixture
def audit_entries(db_session, admin_user, agent_user):
    entries = [
        AuditLog(user_id=agent_user.id, action='LOGIN', resource_type='SESSION',
                 created_at=datetime(2024, 3, 1, 9, 0)),
        AuditLog(user_id=None, user_email='intruder', action='LOGIN_FAILED', resource_type='SESSION',
                 success=False, severity=AuditSeverity.HIGH, created_at=datetime(2024, 3, 15, 22, 30)),
        AuditLog(user_id=admin_user.id, action='DATA_EXPORT', resource_type='USER',
                 severity=AuditSeverity.HIGH, created_at=datetime(2024, 4, 2, 11, 0)),
    ]
    db_session.add_all(entries)
    db_session.commit()
    return entries


class TestAuditLogListing:

    def test_newest_first_and_paginated(self, client, admin_user, audit_entries, auth_headers):
        response = client.get('/api/admin/audit-log?limit=2', headers=auth_headers(admin_user))

        body = response.get_json()
        assert response.status_code == 200
        assert [entry['action'] for entry in body['data']] == ['DATA_EXPORT', 'LOGIN_FAILED']
        assert body['meta'] == {'total': 3, 'page': 1, 'limit': 2, 'totalPages': 2}

    def test_infosec_can_read(self, client, make_user, audit_entries, auth_headers):
        infosec = make_user(Role.INFOSEC)

        assert client.get('/api/admin/audit-log', headers=auth_headers(infosec)).status_code == 200

    @pytest.mark.parametrize('role', [Role.SUPERVISOR, Role.BSS, Role.AGENT])
    def test_other_roles_are_forbidden(self, client, make_user, auth_headers, role):
        user = make_user(role)

        assert client.get('/api/admin/audit-log', headers=auth_headers(user)).status_code == 403

    def test_filters(self, client, admin_user, agent_user, audit_entries, auth_headers):
        headers = auth_headers(admin_user)

        by_user = client.get(f'/api/admin/audit-log?userId={agent_user.id}', headers=headers)
        by_action = client.get('/api/admin/audit-log?action=LOGIN_FAILED', headers=headers)
        by_resource = client.get('/api/admin/audit-log?resourceType=USER', headers=headers)
        by_severity = client.get('/api/admin/audit-log?severity=high', headers=headers)

        assert [e['action'] for e in by_user.get_json()['data']] == ['LOGIN']
        assert [e['userEmail'] for e in by_action.get_json()['data']] == ['intruder']
        assert [e['action'] for e in by_resource.get_json()['data']] == ['DATA_EXPORT']
        assert by_severity.get_json()['meta']['total'] == 2

    def test_date_range_includes_whole_end_day(self, client, admin_user, audit_entries, auth_headers):
        response = client.get('/api/admin/audit-log?startDate=2024-03-01&endDate=2024-03-15',
                              headers=auth_headers(admin_user))

        assert [e['action'] for e in response.get_json()['data']] == ['LOGIN_FAILED', 'LOGIN']

    def test_invalid_date_is_validation_error(self, client, admin_user, auth_headers):
        response = client.get('/api/admin/audit-log?startDate=yesterday', headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'startDate must be an ISO 8601 date'

    def test_inverted_range_is_validation_error(self, client, admin_user, auth_headers):
        response = client.get('/api/admin/audit-log?startDate=2024-04-01&endDate=2024-03-01',
                              headers=auth_headers(admin_user))

        assert response.status_code == 400

    def test_unknown_severity_is_validation_error(self, client, admin_user, auth_headers):
        response = client.get('/api/admin/audit-log?severity=urgent', headers=auth_headers(admin_user))

        assert response.status_code == 400

    def test_get_single_entry(self, client, admin_user, audit_entries, auth_headers):
        entry = audit_entries[1]

        response = client.get(f'/api/admin/audit-log/{entry.id}', headers=auth_headers(admin_user))

        assert response.get_json()['data']['severity'] == 'HIGH'

    def test_entries_cannot_be_written_through_the_api(self, client, admin_user, auth_headers):
        response = client.post('/api/admin/audit-log', json={'action': 'LOGIN'}, headers=auth_headers(admin_user))

        assert response.status_code == 405


class TestAuditService:

    def test_sanitize_details(self):
        sanitized = sanitize_details({'password': 'hunter2', 'apiKey': 'abc', 'email': 'thandi@example.com',
                                      'rows': 4})

        assert sanitized == {'password': '[REDACTED]', 'apiKey': '[REDACTED]', 'email': 't***@example.com',
                             'rows': 4}

    def test_event_joins_the_callers_transaction(self, db_session, admin_user):
        record_audit_event(audit.USER_DELETED, audit.USER, user=admin_user, resource_id='u-1')
        db_session.rollback()

        assert AuditLog.query.count() == 0

    def test_committed_event_captures_actor(self, db_session, admin_user):
        entry = record_audit_event(audit.DATA_EXPORT, audit.REPORT, user=admin_user, commit=True)

        db_session.expire_all()
        stored = db_session.get(AuditLog, entry.id)
        assert stored.user_email == admin_user.email
        assert stored.user_role == 'ADMIN'
        assert stored.ip_address is None


class TestReports:

    @pytest.fixture
    def report_data(self, db_session, sample_campaign, sample_product, make_lead):
        sample_campaign.click_count = 10
        sample_campaign.lead_count = 7
        db_session.commit()
        in_campaign = make_lead(full_name='Zanele', campaign_id=sample_campaign.id)
        in_campaign.products.append(sample_product)
        make_lead(full_name='Direct')
        make_lead(full_name='Old', created_at=datetime(2020, 1, 1))
        db_session.commit()
        return in_campaign

    def test_lead_details(self, client, admin_user, report_data, auth_headers):
        response = client.get('/api/admin/reports/lead-details?startDate=2021-01-01',
                              headers=auth_headers(admin_user))

        body = response.get_json()
        assert response.status_code == 200
        assert body['meta']['reportType'] == 'lead-details'
        rows = {row['full_name']: row for row in body['data']}
        assert set(rows) == {'Zanele', 'Direct'}
        assert rows['Zanele']['campaign'] == 'Spring Promo'
        assert rows['Zanele']['products'] == 'Fibre Internet'
        assert rows['Zanele']['business_sector'] == 'Retail'
        assert rows['Direct']['campaign'] == 'N/A'

    def test_campaign_performance_counts_actual_leads(self, client, admin_user, report_data, auth_headers):
        response = client.get('/api/admin/reports/campaign-performance', headers=auth_headers(admin_user))

        [row] = response.get_json()['data']
        assert row['click_count'] == 10
        assert row['lead_count'] == 1

    def test_user_activity(self, client, admin_user, agent_user, sample_campaign, auth_headers):
        response = client.get('/api/admin/reports/user-activity', headers=auth_headers(admin_user))

        rows = {row['id']: row for row in response.get_json()['data']}
        assert rows[admin_user.id]['campaigns_created'] == 1
        assert rows[agent_user.id]['campaigns_created'] == 0
        assert rows[agent_user.id]['last_login'] == 'N/A'

    def test_report_run_is_audited(self, client, admin_user, auth_headers):
        client.get('/api/admin/reports/user-activity', headers=auth_headers(admin_user))

        entry = AuditLog.query.filter_by(action='DATA_EXPORT').one()
        assert entry.resource_type == 'REPORT'
        assert entry.resource_id == 'user-activity'

    def test_unknown_report_type(self, client, admin_user, auth_headers):
        response = client.get('/api/admin/reports/revenue', headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.get_json()['message'].startswith('Invalid report type: revenue')

    def test_reports_are_admin_only(self, client, supervisor_user, auth_headers):
        response = client.get('/api/admin/reports/lead-details', headers=auth_headers(supervisor_user))

        assert response.status_code == 403

    def test_empty_window(self, client, admin_user, report_data, auth_headers):
        response = client.get('/api/admin/reports/campaign-performance?endDate=2000-01-01',
                              headers=auth_headers(admin_user))

        assert response.get_json()['data'] == []
        assert Campaign.query.count() == 1
        assert Lead.query.count() == 3
