from __future__ import annotations

import pytest
from sqlalchemy.dialects import sqlite

from imageai.templates.templates_query import (
    DEFAULT_LIMIT,
    TemplateFilter,
    build_admin_query,
    build_public_query,
    parse_page_param,
)


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=sqlite.dialect()))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("5", 5), (" 12 ", 12), ("abc", 0), ("", 0), (None, 0), ("-3", -3)],
)
def test_parse_page_param_is_lenient(raw, expected) -> None:
    assert parse_page_param(raw) == expected


def test_filter_normalization_applies_defaults() -> None:
    flt = TemplateFilter(q="  ", limit=0, offset=-4).normalized()

    assert flt.q is None
    assert flt.limit == DEFAULT_LIMIT
    assert flt.offset == 0


def test_unknown_sort_falls_back_to_default_with_slug_tie_break() -> None:
    sql = _sql(build_admin_query(TemplateFilter(sort="; DROP TABLE templates")))

    assert "DROP" not in sql
    assert "ORDER BY templates.updated_at DESC, templates.slug ASC" in sql


def test_public_query_pins_status_and_visibility() -> None:
    sql = _sql(build_public_query(TemplateFilter()))

    assert "templates.status = " in sql
    assert "templates.visibility = " in sql
    assert "prompt" not in sql


def test_tag_filter_uses_exists_subquery() -> None:
    sql = _sql(build_admin_query(TemplateFilter(tags=["retro"])))

    assert "EXISTS" in sql
    assert "tags.slug IN" in sql
