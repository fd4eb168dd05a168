from __future__ import annotations

import pytest

from pastpaper.analytics.store import clear_events
from pastpaper.auth.profiles import clear_profiles
from pastpaper.auth.users import reset_admin_emails
from pastpaper.bookmarks.store import clear_bookmarks
from pastpaper.questions.data_store import reset_store
from pastpaper.search.cache import clear_cache


@pytest.fixture(autouse=True)
def _reset_state():
    """Every test starts from the seed question bank with no activity."""
    reset_store()
    clear_cache()
    clear_events()
    clear_profiles()
    clear_bookmarks()
    reset_admin_emails()
    yield
