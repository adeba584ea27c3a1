"""
MJML templates
Transactional emails for CallingBird tenants (Dutch copy)
"""

from typing import Optional

# App theme colors
THEME = {
    "primary": "#1d4ed8",
    "primary_dark": "#1e40af",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
}

LOGO_URL = "https://callingbird.nl/logo.png"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    footer_note: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if footer_note:
        footer_notice = f"""
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          {footer_note}
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 20px">
          <mj-column>
            <mj-image src="{LOGO_URL}" alt="CallingBird" width="140px" href="https://callingbird.nl" padding="0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © CallingBird. Alle rechten voorbehouden.
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def trial_started_template(company_name: str, trial_ends_at: str, dashboard_url: str) -> str:
    """Trial started email after landing signup"""
    content = f"""
    <mj-text>
      Hallo {company_name},
    </mj-text>

    <mj-text>
      We hebben je account aangemaakt en je SEPA-incasso ingesteld. Je proef loopt tot <strong>{trial_ends_at}</strong>.
    </mj-text>

    <mj-text>
      Na de proefperiode zetten we je abonnement automatisch om naar betaald en schrijven we het gebruik maandelijks af.
    </mj-text>
    """

    return get_base_template(
        title="Welkom bij CallingBird",
        preview_text="Je proef bij CallingBird is gestart",
        content_sections=content,
        cta_url=dashboard_url,
        cta_label="Naar je dashboard",
    )


def invoice_issued_template(
    company_name: str,
    invoice_number: str,
    amount: float,
    currency: str,
    usage_minutes: int,
    price_per_minute: float,
    due_date: str,
    payment_link: Optional[str] = None,
) -> str:
    """Monthly usage invoice notification"""
    content = f"""
    <mj-text>
      Hallo {company_name},
    </mj-text>

    <mj-text>
      Er staat een nieuwe factuur klaar voor je CallingBird-gebruik.
    </mj-text>

    <mj-text align="center" font-size="32px" font-weight="700" color="{THEME['text_primary']}" padding="20px 0">
      {currency} {amount:,.2f}
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      Factuur: {invoice_number}<br/>
      Verbruik: {usage_minutes} minuten<br/>
      Tarief: {price_per_minute} per minuut<br/>
      Vervaldatum: {due_date}
    </mj-text>
    """

    return get_base_template(
        title=f"Factuur {invoice_number}",
        preview_text=f"Je nieuwe CallingBird factuur {invoice_number}",
        content_sections=content,
        cta_url=payment_link,
        cta_label="Factuur betalen" if payment_link else None,
    )


def invoice_paid_template(invoice_number: str, amount: float, currency: str) -> str:
    """Payment received confirmation"""
    content = f"""
    <mj-text>
      We hebben de betaling voor factuur <strong>{invoice_number}</strong> ontvangen.
    </mj-text>

    <mj-text align="center" font-size="28px" font-weight="700" color="{THEME['success']}" padding="20px 0">
      {currency} {amount:,.2f}
    </mj-text>

    <mj-text>
      Heb je vragen over deze betaling? Laat het ons weten.
    </mj-text>
    """

    return get_base_template(
        title="Bedankt voor je betaling",
        preview_text=f"Betaling ontvangen voor factuur {invoice_number}",
        content_sections=content,
    )


def early_access_template(name: Optional[str], company: Optional[str], unsubscribe_url: str) -> str:
    content = f"""
    <mj-text>
      Hey {name or 'daar'}, bedankt voor je interesse!
    </mj-text>

    <mj-text>
      We hebben je early-access aanvraag ontvangen{f' voor {company}' if company else ''}.
      Een van onze teamleden neemt binnen 1 werkdag contact met je op om de volgende stappen te bespreken.
    </mj-text>
    """

    return get_base_template(
        title="Bedankt voor je aanvraag",
        preview_text="Bedankt voor je early-access aanvraag",
        content_sections=content,
        footer_note=f'Wil je geen updates meer? <a href="{unsubscribe_url}" style="color: #64748b;">Afmelden</a>',
    )


__all__ = [
    "THEME",
    "get_base_template",
    "trial_started_template",
    "invoice_issued_template",
    "invoice_paid_template",
    "early_access_template",
]
