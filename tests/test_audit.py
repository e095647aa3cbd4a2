from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from conftest import login, user_id
from gso_library.db.session import engine
from gso_library.models.enums import AuditEventType
from gso_library.services import audit_service
from gso_library.services.audit_service import latest_audit_event_id, list_audit_events, record_audit_event


def _events_since(since_id: int, event_type: AuditEventType):
    with Session(engine) as session:
        return list_audit_events(session, event_type=event_type, since_id=since_id)


def _since() -> int:
    with Session(engine) as session:
        return latest_audit_event_id(session)


def test_login_success_creates_event(client):
    since = _since()
    login(client, 'testadmin')
    events = _events_since(since, AuditEventType.LOGIN_SUCCESS)
    assert [event.username for event in events] == ['testadmin']
    assert events[0].ip_address == 'testclient'


def test_login_unknown_user_records_reason(client):
    since = _since()
    client.post('/api/v1/auth/login', json={'username': 'nonexistent_user', 'password': 'Whatever123!'})
    events = _events_since(since, AuditEventType.LOGIN_FAILURE)
    assert len(events) == 1
    assert events[0].username == 'nonexistent_user'
    assert 'unknown_user' in events[0].detail


def test_login_wrong_password_records_reason(client):
    since = _since()
    client.post('/api/v1/auth/login', json={'username': 'testadmin', 'password': 'WrongPassword1!'})
    events = _events_since(since, AuditEventType.LOGIN_FAILURE)
    assert len(events) == 1
    assert events[0].username == 'testadmin'
    assert 'wrong_password' in events[0].detail


def test_login_disabled_account_records_reason(client, session, admin_headers):
    client.post(f"/api/v1/auth/disable/{user_id(session, 'testuser')}", headers=admin_headers)
    since = _since()
    client.post('/api/v1/auth/login', json={'username': 'testuser', 'password': 'WrongPassword1!'})
    events = _events_since(since, AuditEventType.LOGIN_FAILURE)
    assert len(events) == 1
    assert 'disabled_account' in events[0].detail


def test_login_empty_password_is_unauthenticated_and_recorded(client):
    since = _since()
    response = client.post('/api/v1/auth/login', json={'username': 'testadmin', 'password': ''})
    assert response.status_code == 401
    events = _events_since(since, AuditEventType.LOGIN_FAILURE)
    assert len(events) == 1
    assert events[0].username == 'testadmin'
    assert 'wrong_password' in events[0].detail


def test_login_empty_username_is_unauthenticated_and_recorded(client):
    since = _since()
    response = client.post('/api/v1/auth/login', json={'username': '', 'password': 'Whatever123!'})
    assert response.status_code == 401
    events = _events_since(since, AuditEventType.LOGIN_FAILURE)
    assert len(events) == 1
    assert 'unknown_user' in events[0].detail


def test_token_refresh_creates_event(client):
    tokens = login(client, 'testeditor')
    since = _since()
    response = client.post('/api/v1/auth/refresh', json={'refresh_token': tokens['refresh_token']})
    assert response.status_code == 200
    events = _events_since(since, AuditEventType.TOKEN_REFRESH)
    assert [event.username for event in events] == ['testeditor']


def test_failed_refresh_is_recorded_privately(client):
    since = _since()
    client.post('/api/v1/auth/refresh', json={'refresh_token': 'bogus'})
    events = _events_since(since, AuditEventType.LOGIN_FAILURE)
    assert len(events) == 1
    assert events[0].detail == 'refresh_invalid'


def test_disable_and_enable_record_target(client, session, admin_headers):
    target = user_id(session, 'testuser')
    since = _since()
    client.post(f'/api/v1/auth/disable/{target}', headers=admin_headers)
    client.post(f'/api/v1/auth/enable/{target}', headers=admin_headers)

    disabled = _events_since(since, AuditEventType.ACCOUNT_DISABLE)
    enabled = _events_since(since, AuditEventType.ACCOUNT_ENABLE)
    assert len(disabled) == 1 and len(enabled) == 1
    assert disabled[0].username == 'testadmin'
    assert disabled[0].target_username == 'testuser'
    assert enabled[0].target_username == 'testuser'


def test_role_changes_record_role_name(client, session, admin_headers):
    target = user_id(session, 'testuser')
    since = _since()
    client.post('/api/v1/auth/grant-role', json={'user_id': target, 'role': 'Editor'}, headers=admin_headers)
    client.post('/api/v1/auth/remove-role', json={'user_id': target, 'role': 'Editor'}, headers=admin_headers)

    granted = _events_since(since, AuditEventType.ROLE_GRANT)
    removed = _events_since(since, AuditEventType.ROLE_REMOVE)
    assert len(granted) == 1 and len(removed) == 1
    assert 'Editor' in granted[0].detail
    assert 'Editor' in removed[0].detail
    assert granted[0].target_username == 'testuser'


def test_rejected_admin_action_records_nothing(client, admin_headers):
    admin_id = login(client, 'testadmin')['user_id']
    since = _since()
    client.post(f'/api/v1/auth/disable/{admin_id}', headers=admin_headers)
    assert _events_since(since, AuditEventType.ACCOUNT_DISABLE) == []


def test_audit_failure_does_not_block_login(client, monkeypatch):
    def broken(session, event):
        raise OperationalError('INSERT INTO audit_events', {}, Exception('database is down'))

    monkeypatch.setattr(audit_service, '_persist', broken)
    since = _since()
    body = login(client, 'testadmin')
    assert body['token']
    monkeypatch.undo()
    assert _events_since(since, AuditEventType.LOGIN_SUCCESS) == []


def test_record_accepts_string_event_type(session):
    since = latest_audit_event_id(session)
    record_audit_event(session, 'FileDownload', username='testuser', detail='file=score.pdf')
    events = list_audit_events(session, event_type=AuditEventType.FILE_DOWNLOAD, since_id=since)
    assert [event.detail for event in events] == ['file=score.pdf']


def test_audit_events_endpoint(client, admin_headers, user_headers):
    response = client.get(
        '/api/v1/auth/audit-events',
        params={'event_type': 'LoginSuccess'},
        headers=admin_headers,
    )
    assert response.status_code == 200
    usernames = [item['username'] for item in response.json()]
    assert 'testadmin' in usernames
    assert 'testuser' in usernames

    assert client.get('/api/v1/auth/audit-events', headers=user_headers).status_code == 403


def test_record_unknown_event_type_does_not_raise(session):
    since = latest_audit_event_id(session)
    record_audit_event(session, 'FileDownlaod', username='testuser')
    assert list_audit_events(session, since_id=since) == []


def test_audit_events_endpoint_bounds_paging(client, admin_headers):
    for params in ({'limit': -1}, {'limit': 0}, {'limit': 1001}, {'offset': -1}):
        response = client.get('/api/v1/auth/audit-events', params=params, headers=admin_headers)
        assert response.status_code == 422

    login(client, 'testuser')
    response = client.get('/api/v1/auth/audit-events', params={'limit': 1}, headers=admin_headers)
    assert response.status_code == 200
    assert len(response.json()) == 1
