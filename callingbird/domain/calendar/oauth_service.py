"""
Calendar OAuth service - shared OAuth2 flow for Google and Outlook

Tokens are stored encrypted. Access tokens are refreshed when they expire
within REFRESH_MARGIN; a revoked refresh token means the company has to
connect the calendar again.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...crypto import load_secret, store_secret
from ...errors import CalendarReauthRequiredError
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .repository import CalendarIntegration, CalendarRepository

logger = logging.getLogger(__name__)

REFRESH_MARGIN = timedelta(minutes=5)


class CalendarOAuthService:
    """Base class; subclasses fill in the provider endpoints and account lookup"""

    provider = ""
    display_name = ""
    scopes: list[str] = []

    def __init__(
        self,
        db: Session,
        sync: Optional[AssistantSyncService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.repo = CalendarRepository()
        self.sync = sync or assistant_sync_service
        self.transport = transport

    # Provider specifics

    def _app_credentials(self) -> tuple[Optional[str], Optional[str], Optional[str]]:
        raise NotImplementedError

    def _authorize_endpoint(self) -> str:
        raise NotImplementedError

    def _token_endpoint(self) -> str:
        raise NotImplementedError

    def _extra_auth_params(self) -> dict:
        return {}

    def _get_integration(self, company_id: int) -> Optional[CalendarIntegration]:
        raise NotImplementedError

    def _new_integration(self, company_id: int) -> CalendarIntegration:
        raise NotImplementedError

    async def _fetch_account(self, client: httpx.AsyncClient, access_token: str) -> tuple[Optional[str], Optional[str]]:
        """Return (account email, calendar id) for a fresh access token"""
        raise NotImplementedError

    # Shared flow

    def get_credentials(self) -> tuple[str, str, str]:
        client_id, client_secret, redirect_uri = self._app_credentials()
        if not client_id or not client_secret or not redirect_uri:
            raise HTTPException(status_code=500, detail=f"{self.display_name} not configured")
        return client_id, client_secret, redirect_uri

    def get_authorization_url(self, company_id: int) -> str:
        client_id, _, redirect_uri = self.get_credentials()
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": str(company_id),
            **self._extra_auth_params(),
        }
        return f"{self._authorize_endpoint()}?{urlencode(params)}"

    async def _token_request(self, client: httpx.AsyncClient, data: dict) -> httpx.Response:
        client_id, client_secret, redirect_uri = self.get_credentials()
        return await client.post(
            self._token_endpoint(),
            data={
                "client_id": client_id,
                "client_secret": client_secret,
                "redirect_uri": redirect_uri,
                **data,
            },
        )

    async def connect(self, company_id: int, code: str) -> CalendarIntegration:
        """Exchange the authorization code and store the encrypted tokens"""
        if not code:
            raise HTTPException(status_code=400, detail="No authorization code provided")

        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            token_response = await self._token_request(
                client, {"code": code, "grant_type": "authorization_code"}
            )
            if token_response.status_code != 200:
                logger.error(f"{self.display_name} token exchange failed: {token_response.text}")
                raise HTTPException(status_code=400, detail="Failed to exchange authorization code")

            tokens = token_response.json()
            access_token = tokens.get("access_token")
            if not access_token:
                raise HTTPException(status_code=400, detail="Invalid token response")

            account_email, calendar_id = await self._fetch_account(client, access_token)

        integration = self._get_integration(company_id) or self._new_integration(company_id)
        self._store_tokens(integration, tokens)
        integration.account_email = account_email
        if calendar_id:
            integration.calendar_id = calendar_id
        integration = self.repo.save(self.db, integration)

        logger.info(f"✅ {self.display_name} connected for company {company_id} ({account_email})")
        await self.sync.sync_company(company_id)
        return integration

    def _store_tokens(self, integration: CalendarIntegration, tokens: dict) -> None:
        store_secret(integration, "access_token", tokens["access_token"])
        # Providers only send a refresh token on consent; keep the old one otherwise
        if tokens.get("refresh_token"):
            store_secret(integration, "refresh_token", tokens["refresh_token"])
        integration.token_expires_at = datetime.utcnow() + timedelta(seconds=int(tokens.get("expires_in", 3600)))
        integration.scope = tokens.get("scope", integration.scope)
        integration.token_type = tokens.get("token_type", integration.token_type)

    def get_status(self, company_id: int) -> dict:
        integration = self._get_integration(company_id)
        if not integration:
            return {"connected": False, "accountEmail": None, "calendarId": None, "expiresAt": None}
        return {
            "connected": True,
            "accountEmail": integration.account_email,
            "calendarId": integration.calendar_id,
            "expiresAt": integration.token_expires_at.isoformat() if integration.token_expires_at else None,
        }

    async def disconnect(self, company_id: int) -> None:
        integration = self._get_integration(company_id)
        if not integration:
            raise HTTPException(status_code=404, detail=f"{self.display_name} is not connected")
        self.repo.delete(self.db, integration)
        logger.info(f"🔌 {self.display_name} disconnected for company {company_id}")
        await self.sync.sync_company(company_id)

    async def get_valid_access_token(self, company_id: int) -> str:
        """Decrypted access token, refreshed first when it expires within five minutes"""
        integration = self._get_integration(company_id)
        if not integration:
            raise HTTPException(status_code=404, detail=f"{self.display_name} is not connected")

        expires_at = integration.token_expires_at
        if expires_at and expires_at - REFRESH_MARGIN > datetime.utcnow():
            return load_secret(integration, "access_token")

        refresh_token = load_secret(integration, "refresh_token")
        if not refresh_token:
            raise CalendarReauthRequiredError(self.provider, company_id, self.get_authorization_url(company_id))

        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            response = await self._token_request(
                client, {"refresh_token": refresh_token, "grant_type": "refresh_token"}
            )

        if response.status_code in (400, 401):
            logger.warning(f"⚠️ {self.display_name} refresh token rejected for company {company_id}")
            raise CalendarReauthRequiredError(self.provider, company_id, self.get_authorization_url(company_id))
        if response.status_code != 200:
            logger.error(f"{self.display_name} token refresh failed: {response.text}")
            raise HTTPException(status_code=502, detail=f"Failed to refresh {self.display_name} token")

        tokens = response.json()
        self._store_tokens(integration, tokens)
        self.repo.save(self.db, integration)
        logger.info(f"🔄 {self.display_name} token refreshed for company {company_id}")
        return tokens["access_token"]
