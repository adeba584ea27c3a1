from datetime import date

from callingbird.crypto import store_secret
from callingbird.database import SessionLocal
from callingbird.domain.assistant.context_builder import AssistantContextBuilder
from callingbird.domain.assistant.prompt import build_assistant_payload, build_system_prompt
from callingbird.domain.integrations.service import pick_calendar_provider
from callingbird.models import AppointmentType, CustomInstruction, ProductKnowledge
from callingbird.models_integrations import GoogleIntegration, OutlookIntegration, ShopifyIntegration


def _calendar(model, company_id):
    integration = model(company_id=company_id)
    store_secret(integration, "access_token", "token")
    return integration


async def test_snapshot_contains_published_products_only(make_company, db):
    company = make_company()
    db.add_all(
        [
            ProductKnowledge(company_id=company.id, name="Shampoo", status="published"),
            ProductKnowledge(company_id=company.id, name="Conditioner", status="draft"),
            AppointmentType(company_id=company.id, name="Knippen", duration=30, price=25.0),
            CustomInstruction(company_id=company.id, instruction="Noem altijd de parkeerplaats."),
        ]
    )
    db.commit()

    config = await AssistantContextBuilder(SessionLocal).build(company.id)

    assert [p.name for p in config.products] == ["Shampoo"]
    assert [a.name for a in config.appointment_types] == ["Knippen"]
    assert config.company_name == "Kapsalon De Schaar"
    assert config.calendar_provider is None
    assert config.commerce == {"shopify": False, "woocommerce": False}


async def test_google_wins_over_outlook(make_company, db):
    company = make_company()
    db.add(_calendar(OutlookIntegration, company.id))
    db.add(_calendar(GoogleIntegration, company.id))
    db.commit()

    config = await AssistantContextBuilder(SessionLocal).build(company.id)

    assert config.calendar_provider == "google"


async def test_outlook_used_when_google_missing(make_company, db):
    company = make_company()
    db.add(_calendar(OutlookIntegration, company.id))
    shopify = ShopifyIntegration(company_id=company.id, shop_domain="winkel.myshopify.com")
    store_secret(shopify, "access_token", "shpat_x")
    db.add(shopify)
    db.commit()

    config = await AssistantContextBuilder(SessionLocal).build(company.id)

    assert config.calendar_provider == "outlook"
    assert config.commerce == {"shopify": True, "woocommerce": False}


async def test_missing_company_or_reply_style_gives_none(make_company):
    unconfigured = make_company(configured=False)
    builder = AssistantContextBuilder(SessionLocal)

    assert await builder.build(unconfigured.id) is None
    assert await builder.build(999999) is None


async def test_payload_carries_voice_and_tools(make_company, db):
    company = make_company()
    db.add(_calendar(GoogleIntegration, company.id))
    db.commit()

    config = await AssistantContextBuilder(SessionLocal).build(company.id)
    payload = build_assistant_payload(config)

    assert payload["name"] == "Kapsalon De Schaar"
    assert payload["voice"]["voiceId"] == "voice-1"
    assert payload["metadata"]["calendarProvider"] == "google"
    assert payload["model"]["tools"]
    assert "Kapsalon De Schaar" in build_system_prompt(config, today=date(2025, 8, 14))


def test_pick_calendar_provider():
    assert pick_calendar_provider({"google": True, "outlook": True}) == "google"
    assert pick_calendar_provider({"google": False, "outlook": True}) == "outlook"
    assert pick_calendar_provider({"google": False, "outlook": False}) is None
