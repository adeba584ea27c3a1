"""Turns an AssistantSyncConfig into the Vapi assistant payload"""

from datetime import date
from typing import Optional

from ...config import (
    VAPI_MODEL,
    VAPI_MODEL_PROVIDER,
    VAPI_TOOL_SERVER_URL,
    VAPI_VOICE_PROVIDER,
)
from .context_builder import AssistantSyncConfig

DAY_NAMES = ["Maandag", "Dinsdag", "Woensdag", "Donderdag", "Vrijdag", "Zaterdag", "Zondag"]
MONTH_NAMES = [
    "januari", "februari", "maart", "april", "mei", "juni",
    "juli", "augustus", "september", "oktober", "november", "december",
]


def _day_name(day_of_week: Optional[int]) -> str:
    if day_of_week and 1 <= day_of_week <= 7:
        return DAY_NAMES[day_of_week - 1]
    return "Onbekende dag"


def _dutch_date(value: date) -> str:
    return f"{DAY_NAMES[value.weekday()].lower()} {value.day} {MONTH_NAMES[value.month - 1]} {value.year}"


def build_system_prompt(config: AssistantSyncConfig, today: Optional[date] = None) -> str:
    today = today or date.today()
    lines = [
        f"Je bent een behulpzame Nederlandse spraakassistent voor het bedrijf '{config.company_name}'. "
        f"{config.reply_style.description}",
        "Je praat zo menselijk mogelijk.",
        f"Het is vandaag {_dutch_date(today)}.",
        "Vermijd numerieke datum- en tijdnotatie (zoals '14-08-25' of '10:00'). "
        "Schrijf tijden en datums altijd voluit, bijvoorbeeld 'tien uur' en '14 augustus 2025'.",
        "",
        "Hier is wat informatie over het bedrijf:",
    ]

    if config.details:
        lines.append("\n**Bedrijfsdetails:**")
        lines.append(f"- Naam: {config.details.name}")
        if config.details.industry:
            lines.append(f"- Industrie: {config.details.industry}")
        if config.details.description:
            lines.append(f"- Omschrijving: {config.details.description}")

    contact = config.contact
    if contact:
        lines.append("\n**Contactgegevens:**")
        if contact.website:
            lines.append(f"- Website: {contact.website}")
        if contact.contact_email:
            lines.append(f"- E-mailadres: {contact.contact_email}")
        if contact.phone:
            lines.append(f"- Telefoonnummer: {contact.phone}")
        if contact.address:
            lines.append(f"- Adres: {contact.address}")

    if config.hours:
        lines.append("\n**Openingstijden:**")
        for hour in config.hours:
            if hour.is_open:
                lines.append(f"- {_day_name(hour.day_of_week)}: {hour.open_time} - {hour.close_time}")
            else:
                lines.append(f"- {_day_name(hour.day_of_week)}: Gesloten")

    if config.info:
        lines.append("\n**Algemene Informatie:**")
        lines.extend(f"- {item.value}" for item in config.info)

    if config.appointment_types:
        lines.append("\n**Soorten Afspraken:**")
        for appointment in config.appointment_types:
            lines.append(f"- {appointment.name} ({appointment.duration} minuten)")

    if config.staff_members:
        lines.append("\n**Medewerkers en Beschikbaarheid:**")
        for staff in config.staff_members:
            lines.append(f"- {staff.name} ({staff.role or 'medewerker'})")
            for slot in staff.availability or []:
                day = _day_name(slot.get("dayOfWeek"))
                if slot.get("isActive"):
                    lines.append(f"  - {day}: {slot.get('startTime')} - {slot.get('endTime')}")
                else:
                    lines.append(f"  - {day}: Niet beschikbaar")

    if config.callers:
        lines.append("\n**Bekende Bellers:**")
        for caller in config.callers:
            note = f" - {caller.note}" if caller.note else ""
            lines.append(f"- {caller.name} ({caller.phone_number}){note}")

    if config.products:
        lines.append("\n**Producten:**")
        for product in config.products:
            summary = f": {product.summary}" if product.summary else ""
            lines.append(f"- {product.name}{summary}")

    if config.custom_instructions:
        lines.append("\n**Extra Instructies:**")
        lines.extend(f"- {item.instruction}" for item in config.custom_instructions)

    lines.append("")
    if config.voice_settings.welcome_phrase:
        lines.append(f'Start elk gesprek vriendelijk met: "{config.voice_settings.welcome_phrase}".')

    if config.calendar_provider:
        lines.append(
            "BELANGRIJKE INSTRUCTIE: Je hebt toegang tot de agenda van het bedrijf. Gebruik ALTIJD de "
            "'check_calendar_availability' tool voordat je een afspraak voorstelt. Vraag de gebruiker om hun "
            "volledige naam en geboortedatum voor je de afspraak inplant met 'create_calendar_event'. "
            "Vraag altijd om een expliciete bevestiging voordat je de afspraak definitief inplant."
        )
    else:
        lines.append(
            "BELANGRIJKE INSTRUCTIE: Je hebt GEEN toegang tot de agenda. Als een gebruiker een afspraak wil "
            "maken, bied dan aan om een notitie achter te laten voor het team."
        )

    if config.commerce.get("shopify") or config.commerce.get("woocommerce"):
        lines.append(
            "Je kunt productinformatie en de status van bestellingen opzoeken met 'lookup_product' en "
            "'get_order_status'."
        )

    return "\n".join(lines)


def _function_tool(name: str, description: str, properties: dict, required: list[str]) -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
        "server": {"url": VAPI_TOOL_SERVER_URL},
    }


def build_tools(config: AssistantSyncConfig) -> list[dict]:
    tools = []
    if config.calendar_provider:
        tools.extend(
            [
                _function_tool(
                    "check_calendar_availability",
                    "Controleer de beschikbaarheid in de agenda voor een specifieke datum.",
                    {"date": {"type": "string", "description": "De datum in YYYY-MM-DD formaat"}},
                    ["date"],
                ),
                _function_tool(
                    "create_calendar_event",
                    "Maak een nieuwe afspraak aan in de agenda.",
                    {
                        "summary": {"type": "string", "description": "De titel van de afspraak"},
                        "start": {"type": "string", "description": "Starttijd in ISO 8601"},
                        "end": {"type": "string", "description": "Eindtijd in ISO 8601"},
                        "name": {"type": "string", "description": "Volledige naam van de klant"},
                        "dateOfBirth": {"type": "string", "description": "Geboortedatum (DD-MM-YYYY)"},
                    },
                    ["summary", "start", "end", "name", "dateOfBirth"],
                ),
                _function_tool(
                    "cancel_calendar_event",
                    "Annuleer een afspraak op basis van naam, geboortedatum en datum.",
                    {
                        "name": {"type": "string", "description": "Volledige naam van de klant"},
                        "dateOfBirth": {"type": "string", "description": "Geboortedatum (DD-MM-YYYY)"},
                        "date": {"type": "string", "description": "Datum van de afspraak (YYYY-MM-DD)"},
                    },
                    ["name", "dateOfBirth", "date"],
                ),
            ]
        )

    if config.commerce.get("shopify") or config.commerce.get("woocommerce"):
        tools.extend(
            [
                _function_tool(
                    "lookup_product",
                    "Zoek een product op naam in de webwinkel.",
                    {"name": {"type": "string", "description": "De productnaam"}},
                    ["name"],
                ),
                _function_tool(
                    "get_order_status",
                    "Haal de status van een bestelling op.",
                    {"orderId": {"type": "string", "description": "Het bestelnummer"}},
                    ["orderId"],
                ),
            ]
        )
    return tools


def build_assistant_payload(config: AssistantSyncConfig) -> dict:
    """Full Vapi assistant body, used for both create and update"""
    voice = config.voice_settings
    payload = {
        "name": config.company_name[:40],
        "model": {
            "provider": VAPI_MODEL_PROVIDER,
            "model": VAPI_MODEL,
            "messages": [{"role": "system", "content": build_system_prompt(config)}],
            "tools": build_tools(config),
        },
        "voice": {
            "provider": VAPI_VOICE_PROVIDER,
            "voiceId": voice.voice_id,
            "speed": voice.talking_speed,
        },
        "metadata": {
            "companyId": str(config.company.id),
            "calendarProvider": config.calendar_provider,
            "commerce": config.commerce,
        },
    }
    if voice.welcome_phrase:
        payload["firstMessage"] = voice.welcome_phrase
    return payload
