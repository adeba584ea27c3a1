"""Every configuration change persists first and then asks for an assistant sync"""

import pytest
from fastapi import HTTPException

from callingbird.domain.instructions.service import CustomInstructionService
from callingbird.domain.products.schemas import ProductContent, ProductUpsert
from callingbird.domain.products.service import ProductKnowledgeService, normalize_content
from callingbird.domain.scheduling.schemas import (
    AppointmentTypeCreate,
    AppointmentTypeUpdate,
    StaffAvailability,
    StaffMemberCreate,
)
from callingbird.domain.scheduling.service import SchedulingService
from callingbird.domain.voice.schemas import ReplyStyleUpdate, VoiceSettingsUpdate
from callingbird.domain.voice.service import VoiceSettingsService


class RecordingSync:
    def __init__(self):
        self.requests = []

    async def sync_company(self, company_id):
        self.requests.append(company_id)
        return "asst_1"


@pytest.fixture
def sync():
    return RecordingSync()


async def test_appointment_type_changes_trigger_sync(db, make_company, sync):
    company = make_company()
    service = SchedulingService(db, sync)

    created = await service.add_appointment_type(
        company.id, AppointmentTypeCreate(name=" Knippen ", durationMinutes=30, price=25.0)
    )
    updated = await service.update_appointment_type(
        company.id, created.id, AppointmentTypeUpdate(durationMinutes=45)
    )
    await service.delete_appointment_type(company.id, created.id)

    assert created.name == "Knippen"
    assert updated.duration == 45
    assert sync.requests == [company.id] * 3
    assert service.get_appointment_types(company.id) == []


async def test_unknown_appointment_type_is_404_without_sync(db, make_company, sync):
    company = make_company()
    service = SchedulingService(db, sync)

    with pytest.raises(HTTPException) as exc_info:
        await service.update_appointment_type(company.id, 9999, AppointmentTypeUpdate(name="x"))

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Appointment type not found"
    assert sync.requests == []


async def test_appointment_type_of_other_company_is_not_found(db, make_company, sync):
    owner = make_company(email="a@example.nl")
    other = make_company(email="b@example.nl")
    service = SchedulingService(db, sync)
    created = await service.add_appointment_type(owner.id, AppointmentTypeCreate(name="Kleuren", durationMinutes=60))

    with pytest.raises(HTTPException):
        await service.delete_appointment_type(other.id, created.id)


async def test_staff_member_with_availability(db, make_company, sync):
    company = make_company()
    service = SchedulingService(db, sync)

    staff = await service.add_staff_member(
        company.id,
        StaffMemberCreate(
            name="Anouk",
            specialties=["Knippen"],
            availability=[StaffAvailability(dayOfWeek=1, startTime="09:00", endTime="17:00")],
            googleCalendarId="  ",
        ),
    )

    assert staff.availability == [{"dayOfWeek": 1, "startTime": "09:00", "endTime": "17:00", "isActive": True}]
    assert staff.google_calendar_id is None
    assert sync.requests == [company.id]


def test_availability_rejects_bad_time():
    with pytest.raises(ValueError):
        StaffAvailability(dayOfWeek=1, startTime="9:00", endTime="17:00")


async def test_voice_settings_and_reply_style_trigger_sync(db, make_company, sync):
    company = make_company(configured=False)
    service = VoiceSettingsService(db, sync)

    with pytest.raises(HTTPException) as exc_info:
        service.get_voice_settings(company.id)
    assert exc_info.value.status_code == 404

    await service.save_voice_settings(
        company.id, VoiceSettingsUpdate(voiceId="voice-2", welcomePhrase="  Goedemorgen!  ", talkingSpeed=1.1)
    )
    await service.save_reply_style(company.id, ReplyStyleUpdate(name="formeel", description="Spreek formeel."))

    assert service.get_voice_settings(company.id).welcome_phrase == "Goedemorgen!"
    assert service.get_reply_style(company.id).name == "formeel"
    assert sync.requests == [company.id, company.id]


async def test_empty_instruction_is_rejected(db, make_company, sync):
    company = make_company()
    service = CustomInstructionService(db, sync)

    with pytest.raises(HTTPException) as exc_info:
        await service.create(company.id, "   ")

    assert exc_info.value.status_code == 400
    assert sync.requests == []


async def test_instruction_lifecycle(db, make_company, sync):
    company = make_company()
    service = CustomInstructionService(db, sync)

    row = await service.create(company.id, "  Noem de parkeerplaats achter de zaak.  ")
    assert row.instruction == "Noem de parkeerplaats achter de zaak."

    await service.remove(company.id, row.id)
    assert service.list(company.id) == []
    assert sync.requests == [company.id, company.id]

    with pytest.raises(HTTPException) as exc_info:
        await service.remove(company.id, row.id)
    assert exc_info.value.status_code == 404


async def test_product_update_bumps_version(db, make_company, sync):
    company = make_company()
    service = ProductKnowledgeService(db, sync)

    product = await service.upsert_product(company.id, ProductUpsert(name="Shampoo"))
    assert product.status == "draft"
    assert product.version == 1

    product = await service.upsert_product(
        company.id, ProductUpsert(id=product.id, name="Shampoo", status="published", synonyms=[" wasmiddel ", ""])
    )
    assert product.status == "published"
    assert product.version == 2
    assert product.synonyms == ["wasmiddel"]
    assert sync.requests == [company.id, company.id]


async def test_import_matches_existing_products_by_name(db, make_company, sync):
    company = make_company()
    service = ProductKnowledgeService(db, sync)
    existing = await service.upsert_product(company.id, ProductUpsert(name="Shampoo"))
    sync.requests.clear()

    saved = await service.import_products(
        company.id,
        [ProductUpsert(name="Shampoo", summary="Milde shampoo"), ProductUpsert(name="Gel")],
        target_status="published",
    )

    assert saved[0].id == existing.id
    assert saved[0].version == 2
    assert {p.status for p in saved} == {"published"}
    assert len(service.list_catalog(company.id)) == 2
    assert sync.requests == [company.id]


async def test_empty_import_is_rejected(db, make_company, sync):
    company = make_company()
    with pytest.raises(HTTPException) as exc_info:
        await ProductKnowledgeService(db, sync).import_products(company.id, [])
    assert exc_info.value.status_code == 400


def test_normalize_content_drops_empty_entries():
    content = ProductContent(
        description="  Milde formule ",
        faq=[{"question": "Voor krullen?", "answer": "Ja"}, {"question": " ", "answer": "x"}],
        troubleshooting=["", " Goed uitspoelen "],
    )

    assert normalize_content(content) == {
        "description": "Milde formule",
        "faq": [{"question": "Voor krullen?", "answer": "Ja"}],
        "troubleshooting": ["Goed uitspoelen"],
    }
