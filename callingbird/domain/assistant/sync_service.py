"""
Assistant sync service

Every change to a company's configuration (scheduling, voice, instructions,
products, calendar or commerce connections) asks for an assistant sync. Bursts
of requests for the same company are coalesced: the first request schedules a
sync after a fixed quiet window, and every request that arrives while that sync
is scheduled or running shares its outcome. The fire time is never pushed back.

Per company the cycle is idle -> scheduled -> in_flight -> idle. Coalescing is
per process; several workers may each push the same configuration.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...config import ASSISTANT_SYNC_DEBOUNCE_MS
from ...database import SessionLocal
from ...errors import AssistantSyncError
from ..company.repository import CompanyRepository
from .context_builder import AssistantContextBuilder
from .prompt import build_assistant_payload
from .vapi_client import VapiClient, VapiRequestError

logger = logging.getLogger(__name__)

SCHEDULED = "scheduled"
IN_FLIGHT = "in_flight"


@dataclass
class _PendingSync:
    future: asyncio.Future
    state: str = SCHEDULED
    timer: Optional[asyncio.TimerHandle] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)


def _mark_retrieved(future: asyncio.Future) -> None:
    # Requests that nobody awaits must not log "exception was never retrieved"
    if not future.cancelled():
        future.exception()


class AssistantSyncService:
    def __init__(
        self,
        context_builder: Optional[AssistantContextBuilder] = None,
        vapi_client: Optional[VapiClient] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        quiescence_seconds: float = ASSISTANT_SYNC_DEBOUNCE_MS / 1000,
    ):
        self.context_builder = context_builder or AssistantContextBuilder(session_factory)
        self.vapi_client = vapi_client or VapiClient()
        self.session_factory = session_factory
        self.quiescence_seconds = quiescence_seconds
        self._pending: dict[int, _PendingSync] = {}

    def pending_state(self, company_id: int) -> str:
        """idle, scheduled or in_flight"""
        pending = self._pending.get(company_id)
        return pending.state if pending else "idle"

    def request_sync(self, company_id: int) -> asyncio.Future:
        """
        Ask for an assistant sync and return a future for the current cycle.

        The future resolves with the assistant id (None when the sync was
        skipped) or raises AssistantSyncError. Each caller gets its own shielded
        view of the cycle, so cancelling it (e.g. a wait_for timeout) leaves the
        other callers and the sync itself untouched. Must be called on the event loop.
        """
        pending = self._pending.get(company_id)
        if pending is not None:
            logger.debug(f"Coalescing sync request for company {company_id} ({pending.state})")
            return self._caller_view(pending)

        loop = asyncio.get_running_loop()
        future = loop.create_future()
        future.add_done_callback(_mark_retrieved)
        pending = _PendingSync(future=future)
        pending.timer = loop.call_later(self.quiescence_seconds, self._fire, company_id, pending)
        self._pending[company_id] = pending
        logger.info(f"🕒 Assistant sync scheduled for company {company_id} in {self.quiescence_seconds:.2f}s")
        return self._caller_view(pending)

    @staticmethod
    def _caller_view(pending: _PendingSync) -> asyncio.Future:
        view = asyncio.shield(pending.future)
        view.add_done_callback(_mark_retrieved)
        return view

    async def sync_company(self, company_id: int) -> Optional[str]:
        """Request a coalesced sync and wait for its outcome"""
        return await self.request_sync(company_id)

    def _fire(self, company_id: int, pending: _PendingSync) -> None:
        pending.state = IN_FLIGHT
        pending.timer = None
        pending.task = asyncio.ensure_future(self._run_cycle(company_id, pending))

    async def _run_cycle(self, company_id: int, pending: _PendingSync) -> None:
        try:
            result = await self.sync_now(company_id)
        except Exception as e:
            self._settle(company_id, pending)
            if not pending.future.done():
                pending.future.set_exception(e)
        else:
            self._settle(company_id, pending)
            if not pending.future.done():
                pending.future.set_result(result)

    def _settle(self, company_id: int, pending: _PendingSync) -> None:
        if self._pending.get(company_id) is pending:
            del self._pending[company_id]

    async def sync_now(self, company_id: int) -> Optional[str]:
        """Build the configuration snapshot and push it to Vapi right away"""
        try:
            config = await self.context_builder.build(company_id)
            if config is None:
                logger.warning(f"⚠️ Skipping assistant sync for company {company_id}: missing configuration")
                return None

            connected = [name for name, enabled in config.commerce.items() if enabled]
            logger.info(
                f"🛒 Commerce connections for company {company_id}: {', '.join(connected) or 'none'}"
            )

            payload = build_assistant_payload(config)
            assistant_id = config.company.assistant_id

            if not assistant_id:
                return await self._create_assistant(company_id, payload)

            try:
                await self.vapi_client.update_assistant(assistant_id, payload)
            except VapiRequestError as e:
                if e.status_code != 404:
                    raise
                logger.warning(
                    f"⚠️ Assistant {assistant_id} of company {company_id} no longer exists in Vapi, recreating"
                )
                return await self._create_assistant(company_id, payload)

            logger.info(f"✅ Assistant synced for company {company_id}")
            return assistant_id
        except AssistantSyncError:
            raise
        except VapiRequestError as e:
            logger.error(f"❌ Failed to sync assistant for company {company_id}: {e}")
            raise AssistantSyncError(e.messages, e.status_code) from e
        except Exception as e:
            logger.exception(f"❌ Failed to sync assistant for company {company_id}")
            raise AssistantSyncError([str(e) or "Assistant sync failed"], 500) from e

    async def _create_assistant(self, company_id: int, payload: dict) -> str:
        created = await self.vapi_client.create_assistant(payload)
        assistant_id = created.get("id")
        if not assistant_id:
            raise AssistantSyncError(["Vapi did not return an assistant id"], 502)

        await asyncio.to_thread(self._persist_assistant_id, company_id, assistant_id)
        logger.info(f"✅ Assistant {assistant_id} created for company {company_id}")
        return assistant_id

    def _persist_assistant_id(self, company_id: int, assistant_id: str) -> None:
        db = self.session_factory()
        try:
            CompanyRepository.set_assistant_id(db, company_id, assistant_id)
        finally:
            db.close()


assistant_sync_service = AssistantSyncService()


def get_assistant_sync() -> AssistantSyncService:
    """Dependency injection for the process-wide AssistantSyncService"""
    return assistant_sync_service
