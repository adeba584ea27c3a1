"""
Transactional Email Service using Resend
MJML templates are compiled to HTML before sending
"""

import logging
from typing import Optional, Union
from urllib.parse import quote

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, FRONTEND_URL, RESEND_API_KEY
from .email_templates import (
    early_access_template,
    invoice_issued_template,
    invoice_paid_template,
    trial_started_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # Newer mjml releases return an object with .html/.errors, older ones a dict
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {to}")
        response = resend.Emails.send(
            {
                "from": sender,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


async def send_trial_started_email(to: str, company_name: str, trial_ends_at: str) -> dict:
    """Send trial started email after landing signup"""
    return await send_email(
        to=to,
        subject="Je proef bij CallingBird is gestart",
        mjml_content=trial_started_template(company_name, trial_ends_at, f"{FRONTEND_URL}/dashboard"),
    )


async def send_invoice_issued_email(
    to: str,
    company_name: str,
    invoice_number: str,
    amount: float,
    currency: str,
    usage_minutes: int,
    price_per_minute: float,
    due_date: str,
    payment_link: Optional[str] = None,
) -> dict:
    """Send monthly usage invoice"""
    mjml_content = invoice_issued_template(
        company_name=company_name,
        invoice_number=invoice_number,
        amount=amount,
        currency=currency,
        usage_minutes=usage_minutes,
        price_per_minute=price_per_minute,
        due_date=due_date,
        payment_link=payment_link,
    )
    return await send_email(
        to=to,
        subject=f"Je nieuwe CallingBird factuur {invoice_number}",
        mjml_content=mjml_content,
    )


async def send_invoice_paid_email(to: str, invoice_number: str, amount: float, currency: str) -> dict:
    """Send payment received confirmation"""
    return await send_email(
        to=to,
        subject=f"Betaling ontvangen voor factuur {invoice_number}",
        mjml_content=invoice_paid_template(invoice_number, amount, currency),
    )


async def send_early_access_email(to: str, name: Optional[str], company: Optional[str]) -> dict:
    """Send early access confirmation"""
    unsubscribe_url = f"{FRONTEND_URL}/early-access/unsubscribe?email={quote(to)}"
    return await send_email(
        to=to,
        subject="Bedankt voor je early-access aanvraag",
        mjml_content=early_access_template(name, company, unsubscribe_url),
    )
