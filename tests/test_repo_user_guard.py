"""Unit tests: user-scoped query choke point. Repo raises immediately when user_id is None/empty."""

import pytest
from sqlalchemy.dialects import sqlite

from loopy.api.models.link import Link
from loopy.api.repositories.user_filters import select_link_for_user, user_where
from loopy.api.services.repo import (
    UserRequiredError,
    delete_domain,
    get_link,
    insert_domain,
    insert_link,
    list_clicks,
    list_links,
    update_profile,
)
from loopy.api.services.user_guard import require_user_id


def test_repo_raises_on_none_or_empty_user() -> None:
    with pytest.raises(UserRequiredError):
        list_links(None)
    with pytest.raises(UserRequiredError):
        list_links("")
    with pytest.raises(UserRequiredError):
        get_link("   ", "some-id")


def test_writes_raise_before_db_on_missing_user() -> None:
    with pytest.raises(UserRequiredError):
        insert_domain(None, domain="example.com", txt_record_value="t")
    with pytest.raises(UserRequiredError):
        insert_link("", {"slug": "x"})
    with pytest.raises(UserRequiredError):
        delete_domain(None, "d1")
    with pytest.raises(UserRequiredError):
        update_profile(None, {"first_name": "x"})


def test_click_reads_raise_on_missing_user() -> None:
    with pytest.raises(UserRequiredError):
        list_clicks(None, ["l1"])


def test_user_required_error_is_value_error() -> None:
    assert issubclass(UserRequiredError, ValueError)


def test_require_user_id_strips() -> None:
    with pytest.raises(UserRequiredError):
        require_user_id(None)
    assert require_user_id("  ok  ") == "ok"


def test_user_where_produces_clause() -> None:
    clause = user_where(Link, "u1")
    compiled = str(clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))
    assert "user_id" in compiled
    assert "'u1'" in compiled


def test_select_link_for_user_filters_by_user() -> None:
    stmt = select_link_for_user("u1")
    compiled = str(stmt.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))
    assert "links.user_id = 'u1'" in compiled
