"""Outlook calendar OAuth service (Microsoft identity platform v2.0)"""

import logging
from typing import Optional

import httpx

from ...config import (
    OUTLOOK_CLIENT_ID,
    OUTLOOK_CLIENT_SECRET,
    OUTLOOK_REDIRECT_URI,
    OUTLOOK_TENANT_ID,
)
from ...models_integrations import OutlookIntegration
from .oauth_service import CalendarOAuthService

logger = logging.getLogger(__name__)

MICROSOFT_LOGIN_URL = "https://login.microsoftonline.com"
GRAPH_ME_URL = "https://graph.microsoft.com/v1.0/me"
OUTLOOK_CALENDAR_SCOPES = ["offline_access", "User.Read", "Calendars.ReadWrite"]


class OutlookCalendarService(CalendarOAuthService):
    provider = "outlook"
    display_name = "Outlook Calendar"
    scopes = OUTLOOK_CALENDAR_SCOPES

    def _app_credentials(self):
        return OUTLOOK_CLIENT_ID, OUTLOOK_CLIENT_SECRET, OUTLOOK_REDIRECT_URI

    def _authorize_endpoint(self) -> str:
        return f"{MICROSOFT_LOGIN_URL}/{OUTLOOK_TENANT_ID}/oauth2/v2.0/authorize"

    def _token_endpoint(self) -> str:
        return f"{MICROSOFT_LOGIN_URL}/{OUTLOOK_TENANT_ID}/oauth2/v2.0/token"

    def _extra_auth_params(self) -> dict:
        return {"response_mode": "query", "prompt": "select_account"}

    def _get_integration(self, company_id: int) -> Optional[OutlookIntegration]:
        return self.repo.get_outlook(self.db, company_id)

    def _new_integration(self, company_id: int) -> OutlookIntegration:
        return OutlookIntegration(company_id=company_id)

    async def _fetch_account(self, client: httpx.AsyncClient, access_token: str):
        response = await client.get(GRAPH_ME_URL, headers={"Authorization": f"Bearer {access_token}"})
        if response.status_code != 200:
            logger.error(f"Failed to get Microsoft account info: {response.text}")
            return None, None
        me = response.json()
        # Personal accounts have no mail attribute
        return me.get("mail") or me.get("userPrincipalName"), None
