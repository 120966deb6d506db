import asyncio
import logging

import pytest

from trueblazer.config import StoreSettings
from trueblazer.context import compute_source_hash, load_chosen_idea_context
from trueblazer.errors import ContextNotFoundError
from trueblazer.logging import StructuredFormatter, configure_logging
from trueblazer.store import InMemoryRowStore, build_store

from conftest import USER_ID


def test_insert_assigns_id_and_timestamp() -> None:
    store = InMemoryRowStore()

    row = store.insert("ideas", {"user_id": "u", "title": "x"})

    assert row["id"]
    assert row["created_at"]
    assert store.select_one("ideas", {"id": row["id"]}) == row


def test_select_filters_orders_and_limits() -> None:
    store = InMemoryRowStore()
    store.insert("ideas", {"user_id": "u", "title": "old", "created_at": "2025-01-01T00:00:00+00:00"})
    store.insert("ideas", {"user_id": "u", "title": "new", "created_at": "2025-02-01T00:00:00+00:00"})
    store.insert("ideas", {"user_id": "other", "title": "theirs"})

    rows = store.select("ideas", {"user_id": "u"}, columns="title", order_by="created_at", descending=True)

    assert rows == [{"title": "new"}, {"title": "old"}]
    assert store.select("ideas", {"user_id": "u"}, limit=1)[0]["title"] == "old"


def test_selected_rows_are_copies() -> None:
    store = InMemoryRowStore()
    store.insert("ideas", {"id": "1", "title": "x"})

    store.select_one("ideas", {"id": "1"})["title"] = "changed"

    assert store.select_one("ideas", {"id": "1"})["title"] == "x"


def test_resolve_user() -> None:
    store = InMemoryRowStore()
    store.register_session("token", "user")

    assert store.resolve_user("token") == "user"
    assert store.resolve_user("other") is None


def test_build_store_defaults_to_memory() -> None:
    assert isinstance(build_store(StoreSettings()), InMemoryRowStore)


def test_source_hash_ignores_key_order() -> None:
    assert compute_source_hash({"a": 1, "b": [1, 2]}) == compute_source_hash({"b": [1, 2], "a": 1})
    assert compute_source_hash({"a": 1}) != compute_source_hash({"a": 2})


def test_chosen_idea_context(store: InMemoryRowStore) -> None:
    context = asyncio.run(load_chosen_idea_context(store, USER_ID, require_analysis=True))

    assert context.idea["id"] == "idea-chosen"
    assert context.profile["time_per_week"] == 15
    assert context.analysis["niche_score"] == 7


def test_chosen_idea_context_requires_profile(store: InMemoryRowStore) -> None:
    store.update("founder_profiles", {"user_id": USER_ID}, {"user_id": "someone-else"})

    with pytest.raises(ContextNotFoundError, match="No founder profile found"):
        asyncio.run(load_chosen_idea_context(store, USER_ID, require_analysis=False))


def test_configure_logging_is_idempotent() -> None:
    logger = configure_logging("DEBUG")
    configure_logging("DEBUG")

    assert len([h for h in logger.handlers if h.get_name() == "trueblazer-stdout"]) == 1
    assert logger.level == logging.DEBUG


def test_structured_formatter_includes_extra_data() -> None:
    record = logging.LogRecord("trueblazer.context", logging.INFO, __file__, 1, "Context fetched", None, None)
    record.extra_data = {"idea_id": "idea-1"}

    line = StructuredFormatter().format(record)

    assert "level=INFO" in line
    assert "message=Context fetched" in line
    assert "idea_id=idea-1" in line
