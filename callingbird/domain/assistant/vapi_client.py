"""Vapi client - assistant configuration REST API"""

import logging
from typing import Any, Optional

import httpx

from ...config import VAPI_API_KEY, VAPI_BASE_URL
from ...errors import UpstreamRequestError

logger = logging.getLogger(__name__)


class VapiRequestError(UpstreamRequestError):
    def __init__(self, status_code: int, messages: list[str]):
        super().__init__("Vapi", status_code, messages)


def extract_error_messages(response: httpx.Response) -> list[str]:
    """Vapi puts errors in ``message`` (string or list), sometimes in ``error``"""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, list):
            messages = [str(m) for m in message if m]
            if messages:
                return messages
        elif message:
            return [str(message)]
        if body.get("error"):
            return [str(body["error"])]

    text = response.text.strip()
    return [text] if text else []


class VapiClient:
    """Creates and updates assistants through the Vapi REST API"""

    def __init__(
        self,
        api_key: Optional[str] = VAPI_API_KEY,
        base_url: str = VAPI_BASE_URL,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

        if not self.api_key:
            logger.warning("VAPI_API_KEY not set; assistant sync will fail until configured")

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict[str, Any]:
        if not self.api_key:
            raise VapiRequestError(500, ["VAPI_API_KEY is not configured"])

        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            response = await client.request(
                method,
                path,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )

        if response.status_code >= 400:
            messages = extract_error_messages(response)
            logger.error(f"❌ Vapi {method} {path} failed ({response.status_code}): {messages}")
            raise VapiRequestError(response.status_code, messages)

        return response.json() if response.content else {}

    async def create_assistant(self, payload: dict) -> dict[str, Any]:
        """Create a new assistant, returns the Vapi assistant object"""
        data = await self._request("POST", "/assistant", payload)
        logger.info(f"✅ Vapi assistant created: {data.get('id')}")
        return data

    async def update_assistant(self, assistant_id: str, payload: dict) -> dict[str, Any]:
        """Update an existing assistant"""
        data = await self._request("PATCH", f"/assistant/{assistant_id}", payload)
        logger.info(f"✅ Vapi assistant updated: {assistant_id}")
        return data
