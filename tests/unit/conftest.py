"""Shared fixtures: an in-memory database per test and scripted catalog clients."""

from typing import Dict, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mastery.database import Base
from mastery import models  # noqa: F401
from mastery.errors import NetworkError


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def make_item(slug: str, difficulty: str = "Easy", tags: List[str] = None, frontend_id=None) -> Dict:
    """A raw catalog item as returned by CatalogClient.fetch_page."""
    return {
        "title": slug.replace("-", " ").title(),
        "slug": slug,
        "difficulty": difficulty,
        "topicTags": list(tags or []),
        "frontendId": frontend_id,
    }


def make_pages(page_count: int, page_size: int) -> List[List[Dict]]:
    pages = []
    for page in range(page_count):
        pages.append([
            make_item(f"problem-{page}-{i}", ["Easy", "Medium", "Hard"][i % 3], [f"tag-{i % 2}"])
            for i in range(page_size)
        ])
    return pages


class ScriptedCatalogClient:
    """
    Serves pre-built pages by offset.

    failures maps an offset to the number of NetworkErrors raised before the
    page is served; -1 fails forever. errors maps an offset to an exception
    raised on every call.
    """

    def __init__(self, pages, failures=None, errors=None):
        self.pages = pages
        self.failures = dict(failures or {})
        self.errors = dict(errors or {})
        self.calls = []

    def fetch_page(self, page_size: int, offset: int):
        self.calls.append(offset)

        if offset in self.errors:
            raise self.errors[offset]

        remaining = self.failures.get(offset, 0)
        if remaining != 0:
            if remaining > 0:
                self.failures[offset] = remaining - 1
            raise NetworkError(f"connection reset at offset {offset}", offset)

        index = offset // page_size
        if index < len(self.pages):
            return [dict(item) for item in self.pages[index]]
        return []


class SleepRecorder:
    """Stands in for time.sleep."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep():
    return SleepRecorder()
