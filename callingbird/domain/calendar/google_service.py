"""Google Calendar OAuth service"""

import logging
from typing import Optional

import httpx

from ...config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI
from ...models_integrations import GoogleIntegration
from .oauth_service import CalendarOAuthService

logger = logging.getLogger(__name__)

# Google OAuth URLs
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_PRIMARY_CALENDAR_URL = "https://www.googleapis.com/calendar/v3/users/me/calendarList/primary"
GOOGLE_CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/userinfo.email",
]


class GoogleCalendarService(CalendarOAuthService):
    provider = "google"
    display_name = "Google Calendar"
    scopes = GOOGLE_CALENDAR_SCOPES

    def _app_credentials(self):
        return GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI

    def _authorize_endpoint(self) -> str:
        return GOOGLE_AUTH_URL

    def _token_endpoint(self) -> str:
        return GOOGLE_TOKEN_URL

    def _extra_auth_params(self) -> dict:
        # offline + consent so Google always returns a refresh token
        return {"access_type": "offline", "prompt": "consent"}

    def _get_integration(self, company_id: int) -> Optional[GoogleIntegration]:
        return self.repo.get_google(self.db, company_id)

    def _new_integration(self, company_id: int) -> GoogleIntegration:
        return GoogleIntegration(company_id=company_id, calendar_id="primary")

    async def _fetch_account(self, client: httpx.AsyncClient, access_token: str):
        headers = {"Authorization": f"Bearer {access_token}"}

        user_info_response = await client.get(GOOGLE_USERINFO_URL, headers=headers)
        if user_info_response.status_code != 200:
            logger.error(f"Failed to get Google user info: {user_info_response.text}")
            account_email = None
        else:
            account_email = user_info_response.json().get("email")

        calendar_id = "primary"
        calendar_response = await client.get(GOOGLE_PRIMARY_CALENDAR_URL, headers=headers)
        if calendar_response.status_code == 200:
            calendar_id = calendar_response.json().get("id", "primary")

        return account_email, calendar_id
