import os
import tempfile

# Settings are read at import time, so they have to be in place before callingbird is imported
_tmp_dir = tempfile.mkdtemp(prefix="callingbird-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["MASTER_KEY"] = "8f" * 32
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["ADMIN_JWT_SECRET"] = "test-admin-secret"
os.environ["VAPI_API_KEY"] = "test-vapi-key"
os.environ["MOLLIE_API_KEY"] = "test_mollie_key"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402

from callingbird import main  # noqa: E402, F401
from callingbird.database import Base, SessionLocal, engine  # noqa: E402
from callingbird.models import Company, CompanyDetails, ReplyStyle, VoiceSettings  # noqa: E402

Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_company(db):
    """Create a company; with ``configured`` it also gets voice settings and a reply style"""

    def _make(email="info@kapsalon.nl", name="Kapsalon De Schaar", assistant_id=None, configured=True):
        company = Company(email=email, assistant_id=assistant_id)
        db.add(company)
        db.flush()
        db.add(CompanyDetails(company_id=company.id, name=name))
        if configured:
            db.add(VoiceSettings(company_id=company.id, voice_id="voice-1", talking_speed=1.0))
            db.add(ReplyStyle(company_id=company.id, name="vriendelijk", description="Je bent vriendelijk."))
        db.commit()
        db.refresh(company)
        return company

    return _make
