import re
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from callingbird.domain.billing import billing_service as billing_module
from callingbird.domain.billing.billing_service import (
    BillingService,
    build_invoice_number,
    calculate_amount,
    map_payment_status,
    next_billing_period,
    resolve_as_of_date,
    usage_minutes,
)
from callingbird.domain.billing.mollie_service import MollieRequestError, format_amount
from callingbird.domain.billing.schemas import BillingProfileUpdate, LandingSignupRequest
from callingbird.models import Company, PricingSettings
from callingbird.models_billing import BillingProfile, CallLog, Invoice

NOW = datetime(2025, 3, 1, 8, 0, 0)
TRIAL_END = datetime(2025, 1, 15, 0, 0, 0)


class FakeMollie:
    def __init__(self, payment_status="pending", failing_customers=()):
        self.payment_status = payment_status
        self.failing_customers = set(failing_customers)
        self.payments = []

    async def create_customer(self, name, email):
        return {"id": "cst_test"}

    async def create_mandate(self, customer_id, consumer_name, consumer_account, mandate_reference=None):
        return {"id": "mdt_test", "customerId": customer_id}

    async def create_payment(self, **kwargs):
        if kwargs["customer_id"] in self.failing_customers:
            raise MollieRequestError(422, ["The mandate is invalid"])
        self.payments.append(kwargs)
        return {
            "id": f"tr_{len(self.payments)}",
            "status": "open",
            "_links": {"checkout": {"href": f"https://mollie.test/checkout/{len(self.payments)}"}},
        }

    async def get_payment(self, payment_id):
        return {"id": payment_id, "status": self.payment_status}


@pytest.fixture(autouse=True)
def emails(monkeypatch):
    mocks = {
        "issued": AsyncMock(),
        "paid": AsyncMock(),
        "trial": AsyncMock(),
    }
    monkeypatch.setattr(billing_module, "send_invoice_issued_email", mocks["issued"])
    monkeypatch.setattr(billing_module, "send_invoice_paid_email", mocks["paid"])
    monkeypatch.setattr(billing_module, "send_trial_started_email", mocks["trial"])
    return mocks


@pytest.fixture
def billable(db, make_company):
    def _make(
        email="info@kapsalon.nl",
        status="trial",
        trial_ends_at=TRIAL_END,
        price=0.35,
        customer="cst_1",
        mandate="mdt_1",
    ):
        company = make_company(email=email)
        db.add(
            BillingProfile(
                company_id=company.id,
                status=status,
                trial_ends_at=trial_ends_at,
                price_per_minute=price,
                mollie_customer_id=customer,
                mollie_mandate_id=mandate,
            )
        )
        db.commit()
        return company

    return _make


def add_call(db, company_id, started_at, seconds):
    db.add(
        CallLog(
            company_id=company_id,
            call_sid=f"call-{company_id}-{started_at.isoformat()}-{seconds}",
            started_at=started_at,
            duration_seconds=seconds,
        )
    )
    db.commit()


def make_service(db, mollie=None):
    return BillingService(db, mollie=mollie or FakeMollie(), clock=lambda: NOW)


# ============================================================================
# PERIOD AND AMOUNT MATH
# ============================================================================


def test_as_of_date_is_last_instant_of_month():
    assert resolve_as_of_date(2, 2024, NOW) == datetime(2024, 2, 29, 23, 59, 59, 999000)
    assert resolve_as_of_date(13, 2025, NOW) == datetime(2025, 12, 31, 23, 59, 59, 999000)
    assert resolve_as_of_date(None, 2025, NOW) == NOW


def test_next_period_follows_previous_by_one_second():
    start, end = next_billing_period(datetime(2025, 2, 15), TRIAL_END)
    assert start == datetime(2025, 2, 15, 0, 0, 1)
    assert end == datetime(2025, 3, 15, 0, 0, 1)


def test_next_period_clamps_to_month_end():
    start, end = next_billing_period(None, datetime(2025, 1, 31, 12, 0))
    assert start == datetime(2025, 1, 31, 12, 0)
    assert end == datetime(2025, 2, 28, 12, 0)


def test_minutes_round_up_and_amount_rounds_half_up():
    assert usage_minutes(0) == 0
    assert usage_minutes(1) == 1
    assert usage_minutes(60) == 1
    assert usage_minutes(61) == 2
    assert calculate_amount(1, 0.125) == 0.13
    assert calculate_amount(3, 0.35) == 1.05


def test_invoice_number_format():
    number = build_invoice_number(42, datetime(2025, 1, 15), datetime(2025, 2, 15), NOW)
    assert re.fullmatch(r"CB-42-20250115-20250215-\d{6}", number)


def test_payment_status_mapping():
    assert map_payment_status("paid") == "paid"
    assert map_payment_status("authorized") == "paid"
    assert map_payment_status("pending") == "processing"
    for status in ("expired", "failed", "canceled"):
        assert map_payment_status(status) == "failed"
    assert map_payment_status("open") == "pending"
    assert map_payment_status(None) == "pending"


def test_mollie_amount_has_two_decimals():
    assert format_amount(12) == "12.00"
    assert format_amount(0.125) == "0.13"


# ============================================================================
# BILLING RUN
# ============================================================================


async def test_closed_period_is_invoiced(db, billable, emails):
    company = billable()
    add_call(db, company.id, datetime(2025, 1, 20, 10, 0), 61)
    add_call(db, company.id, datetime(2025, 2, 1, 9, 30), 30)
    # Before the period and exactly at its end; neither counts
    add_call(db, company.id, datetime(2025, 1, 10, 9, 0), 600)
    add_call(db, company.id, datetime(2025, 2, 15, 0, 0), 600)
    mollie = FakeMollie()

    result = await make_service(db, mollie).run_monthly_billing(month=2, year=2025)

    assert result["invoicesCreated"] == 1
    assert result["failures"] == []
    summary = result["invoices"][0]
    assert summary["amount"] == 0.7
    assert summary["status"] == "open"
    assert summary["paymentLink"] == "https://mollie.test/checkout/1"
    assert summary["periodStart"] == "2025-01-15T00:00:00"
    assert summary["periodEnd"] == "2025-02-15T00:00:00"
    assert result["totalAmount"] == 0.7

    invoice = db.query(Invoice).filter(Invoice.company_id == company.id).one()
    assert invoice.usage_seconds == 91
    assert invoice.mollie_payment_id == "tr_1"
    assert invoice.due_at == datetime(2025, 3, 8, 8, 0, 0)
    assert invoice.invoice_metadata["usageMinutes"] == 2
    assert invoice.invoice_metadata["billingEmail"] == "info@kapsalon.nl"
    assert invoice.invoice_metadata["companyName"] == "Kapsalon De Schaar"

    assert mollie.payments[0]["sequence_type"] == "recurring"
    assert mollie.payments[0]["mandate_id"] == "mdt_1"
    emails["issued"].assert_awaited_once()


async def test_trial_flips_to_active_and_marker_advances(db, billable):
    company = billable()

    await make_service(db).run_monthly_billing(month=2, year=2025)

    db.expire_all()
    profile = db.query(BillingProfile).filter(BillingProfile.company_id == company.id).one()
    assert profile.status == "active"
    assert profile.last_billed_month == TRIAL_END


async def test_open_period_is_skipped(db, billable):
    billable(trial_ends_at=datetime(2025, 2, 10))

    result = await make_service(db).run_monthly_billing(month=2, year=2025)

    assert result["invoicesCreated"] == 0
    assert db.query(Invoice).count() == 0


async def test_period_inside_extended_trial_is_skipped(db, billable):
    company = billable(trial_ends_at=datetime(2025, 3, 20))
    _invoice(db, company.id)

    result = await make_service(db).run_monthly_billing(month=3, year=2025)

    # next period 2025-02-15T00:00:01 .. 2025-03-15T00:00:01 has closed but ends inside the trial
    assert result["invoicesCreated"] == 0
    assert db.query(Invoice).filter(Invoice.company_id == company.id).count() == 1


async def test_rerun_creates_no_duplicate_invoice(db, billable):
    billable()
    service = make_service(db)

    await service.run_monthly_billing(month=2, year=2025)
    second = await service.run_monthly_billing(month=2, year=2025)

    assert second["invoicesCreated"] == 0
    assert db.query(Invoice).count() == 1


async def test_next_run_continues_after_previous_period(db, billable):
    company = billable()
    service = make_service(db)

    await service.run_monthly_billing(month=2, year=2025)
    result = await service.run_monthly_billing(month=3, year=2025)

    assert result["invoicesCreated"] == 1
    assert result["invoices"][0]["periodStart"] == "2025-02-15T00:00:01"
    assert result["invoices"][0]["periodEnd"] == "2025-03-15T00:00:01"
    assert db.query(Invoice).filter(Invoice.company_id == company.id).count() == 2


async def test_zero_usage_is_marked_paid_without_payment(db, billable):
    billable()
    mollie = FakeMollie()

    result = await make_service(db, mollie).run_monthly_billing(month=2, year=2025)

    assert result["invoices"][0]["amount"] == 0
    assert result["invoices"][0]["status"] == "paid"
    assert mollie.payments == []


async def test_no_mollie_customer_leaves_invoice_pending(db, billable):
    company = billable(customer=None, mandate=None)
    add_call(db, company.id, datetime(2025, 1, 20), 120)

    result = await make_service(db).run_monthly_billing(month=2, year=2025)

    assert result["invoices"][0]["status"] == "pending"
    assert result["invoices"][0]["paymentLink"] is None


async def test_first_payment_without_mandate(db, billable):
    company = billable(mandate=None)
    add_call(db, company.id, datetime(2025, 1, 20), 120)
    mollie = FakeMollie()

    await make_service(db, mollie).run_monthly_billing(month=2, year=2025)

    assert mollie.payments[0]["sequence_type"] == "first"


async def test_default_price_from_pricing_settings(db, billable):
    company = billable(price=None)
    db.add(PricingSettings(id=1, price_per_minute=0.5, cost_per_minute=0.1))
    db.commit()
    add_call(db, company.id, datetime(2025, 1, 20), 180)

    result = await make_service(db).run_monthly_billing(month=2, year=2025)

    assert result["invoices"][0]["amount"] == 1.5


async def test_canceled_profiles_are_not_billed(db, billable):
    billable(status="canceled")

    result = await make_service(db).run_monthly_billing(month=2, year=2025)

    assert result["invoicesCreated"] == 0


async def test_one_failing_company_does_not_stop_the_run(db, billable):
    broken = billable(email="kapot@example.nl", customer="cst_broken")
    healthy = billable(email="gezond@example.nl", customer="cst_ok")
    add_call(db, broken.id, datetime(2025, 1, 20), 120)
    add_call(db, healthy.id, datetime(2025, 1, 20), 120)

    result = await make_service(db, FakeMollie(failing_customers={"cst_broken"})).run_monthly_billing(
        month=2, year=2025
    )

    assert result["invoicesCreated"] == 1
    assert result["invoices"][0]["companyId"] == str(healthy.id)
    assert result["failures"][0]["companyId"] == str(broken.id)
    assert "mandate is invalid" in result["failures"][0]["error"]
    assert db.query(Invoice).filter(Invoice.company_id == broken.id).count() == 0
    db.expire_all()
    profile = db.query(BillingProfile).filter(BillingProfile.company_id == broken.id).one()
    assert profile.status == "trial"
    assert profile.last_billed_month is None


async def test_email_failure_does_not_fail_the_run(db, billable, emails):
    company = billable()
    add_call(db, company.id, datetime(2025, 1, 20), 120)
    emails["issued"].side_effect = Exception("Email service not configured")

    result = await make_service(db).run_monthly_billing(month=2, year=2025)

    assert result["invoicesCreated"] == 1
    assert result["failures"] == []


# ============================================================================
# MOLLIE WEBHOOK
# ============================================================================


def _invoice(db, company_id, payment_id="tr_abc", status="open"):
    invoice = Invoice(
        company_id=company_id,
        invoice_number=f"CB-{company_id}-20250115-20250215-123456",
        amount=12.5,
        currency="EUR",
        usage_seconds=2143,
        price_per_minute=0.35,
        status=status,
        issued_at=NOW,
        due_at=NOW,
        period_start=TRIAL_END,
        period_end=datetime(2025, 2, 15),
        mollie_payment_id=payment_id,
        payment_link="https://mollie.test/checkout/old",
        invoice_metadata={"billingEmail": "info@kapsalon.nl"},
    )
    db.add(invoice)
    db.commit()
    return invoice


async def test_authorized_payment_marks_invoice_paid(db, make_company, emails):
    company = make_company()
    _invoice(db, company.id)

    invoice = await make_service(db, FakeMollie(payment_status="authorized")).handle_mollie_webhook("tr_abc")

    assert invoice.status == "paid"
    assert invoice.payment_link == "https://mollie.test/checkout/old"
    emails["paid"].assert_awaited_once()


async def test_repeated_paid_webhook_sends_one_confirmation(db, make_company, emails):
    company = make_company()
    _invoice(db, company.id)
    service = make_service(db, FakeMollie(payment_status="paid"))

    await service.handle_mollie_webhook("tr_abc")
    invoice = await service.handle_mollie_webhook("tr_abc")

    assert invoice.status == "paid"
    emails["paid"].assert_awaited_once()


async def test_pending_payment_marks_invoice_processing(db, make_company, emails):
    company = make_company()
    _invoice(db, company.id)

    invoice = await make_service(db, FakeMollie(payment_status="pending")).handle_mollie_webhook("tr_abc")

    assert invoice.status == "processing"
    emails["paid"].assert_not_awaited()


async def test_failed_payment_marks_invoice_failed(db, make_company):
    company = make_company()
    _invoice(db, company.id)

    invoice = await make_service(db, FakeMollie(payment_status="expired")).handle_mollie_webhook("tr_abc")

    assert invoice.status == "failed"


async def test_unknown_payment_is_ignored(db):
    assert await make_service(db).handle_mollie_webhook("tr_unknown") is None


async def test_missing_payment_id_is_rejected(db):
    with pytest.raises(HTTPException) as exc_info:
        await make_service(db).handle_mollie_webhook(None)
    assert exc_info.value.status_code == 400


# ============================================================================
# SIGNUP & ADMIN
# ============================================================================


async def test_landing_signup_starts_trial(db, emails):
    request = LandingSignupRequest(
        companyName="Bakkerij Bol",
        email="Info@Bakkerij.nl",
        password="geheim123",
        iban="NL91 ABNA 0417 1643 00",
        accountHolderName="J. Bol",
    )

    result = await make_service(db).create_landing_signup(request)

    assert result["mollieCustomerId"] == "cst_test"
    assert result["mollieMandateId"] == "mdt_test"
    assert result["trialEndsAt"] == "2025-03-15T08:00:00"
    company = db.query(Company).filter(Company.email == "info@bakkerij.nl").one()
    assert company.password_hash != "geheim123"
    assert company.details.name == "Bakkerij Bol"
    profile = db.query(BillingProfile).filter(BillingProfile.company_id == company.id).one()
    assert profile.status == "trial"
    emails["trial"].assert_awaited_once()


async def test_duplicate_signup_conflicts(db, make_company):
    make_company(email="info@bakkerij.nl")
    request = LandingSignupRequest(
        companyName="Bakkerij Bol",
        email="info@bakkerij.nl",
        password="geheim123",
        iban="NL91ABNA0417164300",
        accountHolderName="J. Bol",
    )

    with pytest.raises(HTTPException) as exc_info:
        await make_service(db).create_landing_signup(request)
    assert exc_info.value.status_code == 409


def test_profile_override_keeps_unspecified_fields(db, billable):
    company = billable(price=0.35)

    profile = make_service(db).upsert_billing_profile(company.id, BillingProfileUpdate(status="past_due"))

    assert profile.status == "past_due"
    assert profile.price_per_minute == 0.35
    assert profile.mollie_customer_id == "cst_1"


def test_profile_override_for_unknown_company(db):
    with pytest.raises(HTTPException) as exc_info:
        make_service(db).upsert_billing_profile(424242, BillingProfileUpdate(status="active"))
    assert exc_info.value.status_code == 404


def test_pricing_settings_update(db):
    service = make_service(db)
    assert service.get_pricing() == {"pricePerMinute": 0.0, "costPerMinute": 0.0}

    assert service.update_pricing(0.4, None) == {"pricePerMinute": 0.4, "costPerMinute": 0.0}
    assert service.update_pricing(None, 0.12) == {"pricePerMinute": 0.4, "costPerMinute": 0.12}
