from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi import HTTPException

from callingbird.crypto import load_secret, store_secret
from callingbird.domain.calendar import google_service, outlook_service
from callingbird.domain.calendar.google_service import GoogleCalendarService
from callingbird.domain.calendar.outlook_service import OutlookCalendarService
from callingbird.errors import CalendarReauthRequiredError
from callingbird.models_integrations import GoogleIntegration


class RecordingSync:
    def __init__(self):
        self.requests = []

    async def sync_company(self, company_id):
        self.requests.append(company_id)


@pytest.fixture(autouse=True)
def oauth_apps(monkeypatch):
    monkeypatch.setattr(google_service, "GOOGLE_CLIENT_ID", "google-client")
    monkeypatch.setattr(google_service, "GOOGLE_CLIENT_SECRET", "google-secret")
    monkeypatch.setattr(google_service, "GOOGLE_REDIRECT_URI", "https://app.test/google/callback")
    monkeypatch.setattr(outlook_service, "OUTLOOK_CLIENT_ID", "outlook-client")
    monkeypatch.setattr(outlook_service, "OUTLOOK_CLIENT_SECRET", "outlook-secret")
    monkeypatch.setattr(outlook_service, "OUTLOOK_REDIRECT_URI", "https://app.test/outlook/callback")


def google_handler(token_status=200, token_body=None, requests=None):
    def handler(request):
        if requests is not None:
            requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(
                token_status,
                json=token_body or {"access_token": "new-access", "expires_in": 3600, "refresh_token": "refresh-1"},
            )
        if request.url.path.endswith("/userinfo"):
            return httpx.Response(200, json={"email": "agenda@kapsalon.nl"})
        return httpx.Response(200, json={"id": "agenda@kapsalon.nl"})

    return handler


def stored_google(db, company_id, expires_in, refresh_token="refresh-1"):
    integration = GoogleIntegration(company_id=company_id, calendar_id="primary")
    store_secret(integration, "access_token", "old-access")
    store_secret(integration, "refresh_token", refresh_token)
    integration.token_expires_at = datetime.utcnow() + expires_in
    db.add(integration)
    db.commit()
    return integration


def test_authorization_url_carries_company_as_state(db):
    url = GoogleCalendarService(db).get_authorization_url(42)

    query = parse_qs(urlparse(url).query)
    assert query["state"] == ["42"]
    assert query["access_type"] == ["offline"]
    assert query["client_id"] == ["google-client"]


def test_missing_app_credentials_is_500(db, monkeypatch):
    monkeypatch.setattr(google_service, "GOOGLE_CLIENT_SECRET", None)

    with pytest.raises(HTTPException) as exc_info:
        GoogleCalendarService(db).get_authorization_url(1)

    assert exc_info.value.status_code == 500


async def test_connect_stores_encrypted_tokens_and_syncs(db, make_company):
    company = make_company()
    sync = RecordingSync()
    service = GoogleCalendarService(db, sync, transport=httpx.MockTransport(google_handler()))

    integration = await service.connect(company.id, "auth-code")

    assert integration.account_email == "agenda@kapsalon.nl"
    assert integration.calendar_id == "agenda@kapsalon.nl"
    assert "new-access" not in integration.access_token_data
    assert load_secret(integration, "access_token") == "new-access"
    assert load_secret(integration, "refresh_token") == "refresh-1"
    assert sync.requests == [company.id]
    assert service.get_status(company.id)["connected"] is True


async def test_failed_code_exchange_is_400(db, make_company):
    company = make_company()
    sync = RecordingSync()
    service = GoogleCalendarService(
        db, sync, transport=httpx.MockTransport(google_handler(token_status=400, token_body={"error": "invalid_grant"}))
    )

    with pytest.raises(HTTPException) as exc_info:
        await service.connect(company.id, "bad-code")

    assert exc_info.value.status_code == 400
    assert sync.requests == []


async def test_fresh_token_is_used_without_refresh(db, make_company):
    company = make_company()
    stored_google(db, company.id, timedelta(minutes=30))
    requests = []
    service = GoogleCalendarService(db, transport=httpx.MockTransport(google_handler(requests=requests)))

    assert await service.get_valid_access_token(company.id) == "old-access"
    assert requests == []


async def test_token_expiring_within_five_minutes_is_refreshed(db, make_company):
    company = make_company()
    stored_google(db, company.id, timedelta(minutes=4))
    requests = []
    service = GoogleCalendarService(
        db,
        transport=httpx.MockTransport(
            google_handler(requests=requests, token_body={"access_token": "refreshed", "expires_in": 3600})
        ),
    )

    assert await service.get_valid_access_token(company.id) == "refreshed"

    assert parse_qs(requests[0].content.decode())["grant_type"] == ["refresh_token"]
    integration = service._get_integration(company.id)
    assert load_secret(integration, "access_token") == "refreshed"
    # no new refresh token in the response keeps the stored one
    assert load_secret(integration, "refresh_token") == "refresh-1"
    assert integration.token_expires_at > datetime.utcnow() + timedelta(minutes=55)


async def test_revoked_refresh_token_requires_reauth(db, make_company):
    company = make_company()
    stored_google(db, company.id, timedelta(minutes=-1))
    service = GoogleCalendarService(
        db,
        transport=httpx.MockTransport(google_handler(token_status=400, token_body={"error": "invalid_grant"})),
    )

    with pytest.raises(CalendarReauthRequiredError) as exc_info:
        await service.get_valid_access_token(company.id)

    assert exc_info.value.provider == "google"
    assert exc_info.value.status_code == 401
    assert exc_info.value.auth_url.startswith(google_service.GOOGLE_AUTH_URL)


async def test_refresh_server_error_is_502(db, make_company):
    company = make_company()
    stored_google(db, company.id, timedelta(minutes=-1))
    service = GoogleCalendarService(
        db, transport=httpx.MockTransport(google_handler(token_status=503, token_body={"error": "unavailable"}))
    )

    with pytest.raises(HTTPException) as exc_info:
        await service.get_valid_access_token(company.id)

    assert exc_info.value.status_code == 502


async def test_disconnect_removes_tokens_and_syncs(db, make_company):
    company = make_company()
    stored_google(db, company.id, timedelta(minutes=30))
    sync = RecordingSync()
    service = GoogleCalendarService(db, sync)

    await service.disconnect(company.id)

    assert service.get_status(company.id)["connected"] is False
    assert sync.requests == [company.id]
    with pytest.raises(HTTPException) as exc_info:
        await service.disconnect(company.id)
    assert exc_info.value.status_code == 404


async def test_outlook_connect_reads_account_from_graph(db, make_company):
    company = make_company()

    def handler(request):
        if request.url.host == "login.microsoftonline.com":
            return httpx.Response(200, json={"access_token": "ms-access", "refresh_token": "ms-refresh"})
        assert request.headers["Authorization"] == "Bearer ms-access"
        return httpx.Response(200, json={"mail": None, "userPrincipalName": "salon@contoso.nl"})

    service = OutlookCalendarService(db, RecordingSync(), transport=httpx.MockTransport(handler))

    integration = await service.connect(company.id, "code")

    assert integration.account_email == "salon@contoso.nl"
    assert integration.calendar_id is None
