"""Shared fixtures: a throwaway SQLite database and seeding helpers."""

from __future__ import annotations

import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "goout_api_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["APP_TIMEZONE"] = "America/Sao_Paulo"

from app.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.domain.entities import APPLICATION_STATUS_ACCEPTED  # noqa: E402
from app.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from app.infrastructure.models import (  # noqa: E402
    ApplicationModel,
    DMMessageModel,
    EventModel,
    EventSlotModel,
    MessageModel,
    ProfileModel,
)
from app.utils import ensure_app_naive_datetime, now_in_app_timezone  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure the test database starts from a clean state for each test."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def session():
    with SessionLocal() as db:
        yield db


@pytest.fixture
def now() -> datetime:
    return now_in_app_timezone().replace(microsecond=0)


class Seeder:
    """Insert rows straight through the ORM, bypassing the use cases."""

    def profile(self, user_id: str, display_name: str | None = None) -> None:
        with SessionLocal() as db:
            db.add(ProfileModel(user_id=user_id, display_name=display_name))
            db.commit()

    def event(
        self,
        author_id: str,
        title: str = "Trilha no Pico",
        *,
        applicants: dict[str, str] | None = None,
    ) -> int:
        with SessionLocal() as db:
            event = EventModel(author_id=author_id, title=title)
            db.add(event)
            db.flush()
            for applicant_id, status in (applicants or {}).items():
                db.add(
                    ApplicationModel(
                        event_id=event.id, applicant_id=applicant_id, status=status
                    )
                )
            db.commit()
            return event.id

    def accepted_event(self, author_id: str, applicant_id: str, title: str, starts_at: datetime) -> int:
        event_id = self.event(
            author_id, title, applicants={applicant_id: APPLICATION_STATUS_ACCEPTED}
        )
        self.slot(event_id, starts_at)
        return event_id

    def slot(self, event_id: int, starts_at: datetime) -> None:
        local = ensure_app_naive_datetime(starts_at)
        with SessionLocal() as db:
            db.add(
                EventSlotModel(
                    event_id=event_id,
                    date=local.date(),
                    start_time=local.time(),
                    end_time=(local + timedelta(hours=2)).time(),
                )
            )
            db.commit()

    def message(
        self, event_id: int, sender_id: str, body: str, created_at: datetime | None = None
    ) -> int:
        with SessionLocal() as db:
            model = MessageModel(event_id=event_id, sender_id=sender_id, body=body)
            if created_at is not None:
                model.created_at = ensure_app_naive_datetime(created_at)
            db.add(model)
            db.commit()
            return model.id

    def direct_message(
        self, thread_id: int, sender_id: str, body: str, created_at: datetime | None = None
    ) -> int:
        with SessionLocal() as db:
            model = DMMessageModel(thread_id=thread_id, sender_id=sender_id, body=body)
            if created_at is not None:
                model.created_at = ensure_app_naive_datetime(created_at)
            db.add(model)
            db.commit()
            return model.id


@pytest.fixture
def seed() -> Seeder:
    return Seeder()
