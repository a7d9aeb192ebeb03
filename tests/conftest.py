import re
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portal import create_app
from portal.core.config import AppSettings
from portal.core.errors import TransportError

COOKIE = "portal_session"
ERROR_RE = re.compile(r'<p class="error" role="alert">(.*?)</p>', re.S)


class RecordingMailer:
    """Stands in for the SMTP relay and remembers every message."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise TransportError("relay refused the connection")
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture()
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        DATA_DIR=tmp_path,
        DB_URL=f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}",
        BCRYPT_ROUNDS=4,
        METRICS_ENABLED=False,
        MAIL_FROM="noreply@example.com",
        CONTACT_RECIPIENT="owner@example.com",
        LOG_JSON=False,
    )


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def client(settings, mailer):
    app = create_app(settings, mailer=mailer)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def sync_engine(settings, client):
    """Plain sync engine on the same file, for asserting what the app wrote."""

    engine = create_engine(f"sqlite:///{settings.DATA_DIR / 'portal.db'}")
    try:
        yield engine
    finally:
        engine.dispose()


def count_rows(engine, table: str, **where) -> int:
    clause = " AND ".join(f"{col} = :{col}" for col in where) or "1 = 1"
    with engine.connect() as conn:
        return conn.execute(text(f"SELECT COUNT(*) FROM {table} WHERE {clause}"), where).scalar_one()


def register(client, username: str, password: str):
    return client.post("/register", data={"username": username, "password": password}, follow_redirects=False)


def login(client, username: str, password: str):
    return client.post("/login", data={"username": username, "password": password}, follow_redirects=False)


def error_message(html: str) -> str | None:
    match = ERROR_RE.search(html)
    return match.group(1).strip() if match else None
