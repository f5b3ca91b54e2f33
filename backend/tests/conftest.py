import asyncio
import os
import pathlib
import sys
import tempfile

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Must be set before app.database / app.main are imported
_TMP = pathlib.Path(tempfile.mkdtemp(prefix="rfp-portal-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'portal.db'}"
os.environ.setdefault("UPLOAD_DIR", str(_TMP / "uploads"))
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "admin-pass")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RECORD_STORE", "sql")

from fastapi.testclient import TestClient  # noqa: E402

from app.api import deps  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.database import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.base import Base  # noqa: E402
from app.models.vendor import VENDORS, VendorField, VendorStatus  # noqa: E402
from app.services.notifications import NotificationDispatcher  # noqa: E402
from app.services.passwords import hash_password  # noqa: E402
from app.services.sessions import ROLE_ADMIN, ROLE_VENDOR, issue_session_token  # noqa: E402
from app.store.sql import SqlRecordStore  # noqa: E402


def run(coro):
    return asyncio.run(coro)


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.events = []
        self.fail = fail

    async def notify(self, event):
        self.events.append(event)
        if self.fail:
            raise ConnectionError("webhook down")


@pytest.fixture(autouse=True)
def reset_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store():
    return SqlRecordStore(SessionLocal)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(store, notifier):
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_dispatcher] = lambda: NotificationDispatcher(notifier)
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_vendor(store, *, email="ops@jetworks.example", status=VendorStatus.APPROVED, name="JetWorks", password="s3cret!"):
    return run(
        store.create(
            VENDORS,
            {
                VendorField.NAME: name,
                VendorField.CONTACT_PERSON: "Dana Pilot",
                VendorField.EMAIL: email,
                VendorField.PHONE: "+1 555 0100",
                VendorField.WEBSITE: "https://jetworks.example",
                VendorField.SERVICES: "Charter operations software",
                VendorField.PASSWORD_HASH: hash_password(password, rounds=4),
                VendorField.STATUS: status,
            },
        )
    )


def vendor_headers(vendor_id: str) -> dict:
    return {"Authorization": f"Bearer {issue_session_token(vendor_id, ROLE_VENDOR, get_settings())}"}


def admin_headers() -> dict:
    settings = get_settings()
    return {"Authorization": f"Bearer {issue_session_token(settings.admin_email, ROLE_ADMIN, settings)}"}


def proposal(**overrides) -> dict:
    body = {
        "clientWorkflowDescription": "Clients request quotes via app and email",
        "requestCaptureDescription": "Requests land in a shared inbox",
        "internalWorkflowDescription": "Ops team triages in spreadsheets",
        "reportingCapabilities": "Weekly dashboards",
        "integrationScores": {"zendesk": "3", "oracleSql": "2", "avinode": "3"},
        "pciCompliant": True,
        "implementationTimeline": "12 weeks",
        "upfrontCost": "$12,500",
        "monthlyCost": "$2,000 per month incl. support",
        "reference1": {"name": "Sam", "company": "SkyCo", "email": "sam@skyco.example", "reason": "Pilot customer"},
        "infoAccurate": True,
        "contactConsent": True,
    }
    body.update(overrides)
    return body
