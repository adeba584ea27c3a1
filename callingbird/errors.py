"""Typed errors raised by services and translated to HTTP responses in main.py"""

from typing import Optional


class ConfigurationError(Exception):
    """A required setting is missing or malformed"""


class SecretDecryptionError(Exception):
    """Stored credential could not be decrypted (tampered data or wrong key)"""


class AssistantSyncError(Exception):
    """Pushing the assistant configuration to Vapi failed"""

    def __init__(self, messages: Optional[list[str]] = None, status_code: int = 500):
        self.messages = messages or ["Assistant sync failed"]
        self.status_code = status_code
        super().__init__(self.messages[0])


class UpstreamRequestError(Exception):
    """A third-party HTTP API answered with an error status"""

    def __init__(self, service: str, status_code: int, messages: list[str]):
        self.service = service
        self.status_code = status_code
        self.messages = messages or [f"{service} request failed"]
        super().__init__(f"{service} request failed ({status_code}): {'; '.join(self.messages)}")


class ProductMatchError(Exception):
    """Base class for product lookups by name"""


class NoProductMatchError(ProductMatchError):
    def __init__(self, query: str):
        self.query = query
        super().__init__(f"No product found matching '{query}'")


class AmbiguousProductMatchError(ProductMatchError):
    def __init__(self, query: str, candidates: list[str]):
        self.query = query
        self.candidates = candidates
        super().__init__(
            f"Multiple products match '{query}': {', '.join(candidates)}. Please be more specific."
        )


class CalendarReauthRequiredError(Exception):
    """The stored refresh token was revoked; the tenant has to connect the calendar again"""

    def __init__(self, provider: str, company_id: int, auth_url: str, status_code: int = 401):
        self.provider = provider
        self.company_id = company_id
        self.auth_url = auth_url
        self.status_code = status_code
        super().__init__(f"{provider.capitalize()} re-authentication required for company {company_id}")
