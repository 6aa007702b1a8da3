"""
Unit tests for the keyset pagination engine.
"""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from helpdesk.core.cursor import decode_cursor, encode_cursor
from helpdesk.core.pagination import (
    InvalidCursorError,
    Page,
    ascending_by_id,
    clamp_page_size,
    paginate,
    resolve_cursor,
)
from helpdesk.models.orm.ticket import Ticket
from helpdesk.models.orm.user import User
from helpdesk.repositories.ticket import TICKET_ORDER

BASE = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)

ID_ORDER = ascending_by_id(User.id)


def rows_with_ids(*ids: int) -> list[SimpleNamespace]:
    return [SimpleNamespace(id=i) for i in ids]


def ticket_rows(count: int) -> list[SimpleNamespace]:
    """Newest-first rows as the ticket listing would fetch them."""
    return [
        SimpleNamespace(id=count - i, created_at=BASE - timedelta(minutes=i)) for i in range(count)
    ]


@pytest.mark.unit
class TestPaginate:
    """Tests for paginate."""

    def test_first_page_with_more_rows(self):
        page = paginate(rows_with_ids(1, 2, 3), page_size=2, order=ID_ORDER, cursor_supplied=False)

        assert [r.id for r in page.items] == [1, 2]
        assert decode_cursor(page.next_cursor) == {"id": 2}
        assert page.prev_cursor == ""

    def test_last_page_has_no_next_cursor(self):
        page = paginate(rows_with_ids(3, 4), page_size=2, order=ID_ORDER, cursor_supplied=True)

        assert [r.id for r in page.items] == [3, 4]
        assert page.next_cursor == ""
        assert decode_cursor(page.prev_cursor) == {"id": 3}

    def test_exact_fit_has_no_next_cursor(self):
        page = paginate(rows_with_ids(1, 2), page_size=2, order=ID_ORDER, cursor_supplied=False)
        assert page.next_cursor == ""

    def test_empty_page_has_no_cursors(self):
        page = paginate([], page_size=10, order=ID_ORDER, cursor_supplied=True)

        assert page.items == []
        assert page.next_cursor == ""
        assert page.prev_cursor == ""

    def test_compound_cursor_carries_timestamp_and_id(self):
        rows = ticket_rows(3)
        page = paginate(rows, page_size=2, order=TICKET_ORDER, cursor_supplied=False)

        assert decode_cursor(page.next_cursor) == {
            "created_at": "2026-05-01T11:59:00Z",
            "id": 2,
        }

    def test_map_keeps_cursors(self):
        page = Page(items=[1, 2], next_cursor="n", prev_cursor="p")
        mapped = page.map(str)

        assert mapped.items == ["1", "2"]
        assert (mapped.next_cursor, mapped.prev_cursor) == ("n", "p")


@pytest.mark.unit
class TestResolveCursor:
    """Tests for resolve_cursor."""

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_cursor_means_first_page(self, token):
        assert resolve_cursor(token, ID_ORDER) is None

    def test_valid_id_cursor(self):
        assert resolve_cursor(encode_cursor({"id": 7}), ID_ORDER) == {"id": 7}

    def test_valid_compound_cursor(self):
        token = encode_cursor({"created_at": "2026-05-01T12:00:00Z", "id": 3})
        assert resolve_cursor(token, TICKET_ORDER) == {"created_at": BASE, "id": 3}

    def test_garbage_cursor_is_rejected(self):
        with pytest.raises(InvalidCursorError):
            resolve_cursor("not-a-cursor", ID_ORDER)

    def test_cursor_for_another_ordering_is_rejected(self):
        with pytest.raises(InvalidCursorError):
            resolve_cursor(encode_cursor({"id": 7}), TICKET_ORDER)

    def test_extra_keys_are_rejected(self):
        with pytest.raises(InvalidCursorError):
            resolve_cursor(encode_cursor({"id": 7, "name": "x"}), ID_ORDER)

    @pytest.mark.parametrize("value", ["7", 7.5])
    def test_non_integer_id_is_rejected(self, value):
        with pytest.raises(InvalidCursorError):
            resolve_cursor(encode_cursor({"id": value}), ID_ORDER)

    def test_unparseable_timestamp_is_rejected(self):
        token = encode_cursor({"created_at": "last tuesday", "id": 3})
        with pytest.raises(InvalidCursorError):
            resolve_cursor(token, TICKET_ORDER)

    @pytest.mark.parametrize("value", [0, -1, 2**31, 10**30])
    def test_out_of_range_id_is_rejected(self, value):
        with pytest.raises(InvalidCursorError):
            resolve_cursor(encode_cursor({"id": value}), ID_ORDER)

    def test_largest_id_is_accepted(self):
        assert resolve_cursor(encode_cursor({"id": 2**31 - 1}), ID_ORDER) == {"id": 2**31 - 1}

    @pytest.mark.parametrize(
        "position",
        [
            {"created_at": "0001-01-01T00:00:00+01:00", "id": 1},
            {"created_at": "2026-05-01T12:00:00Z", "id": 10**30},
        ],
    )
    def test_out_of_range_compound_cursor_is_rejected(self, position):
        with pytest.raises(InvalidCursorError):
            resolve_cursor(encode_cursor(position), TICKET_ORDER)

    def test_invalid_cursor_is_a_value_error(self):
        assert issubclass(InvalidCursorError, ValueError)


@pytest.mark.unit
class TestKeysetOrder:
    """Tests for KeysetOrder query fragments."""

    def test_ticket_order_is_compound_descending(self):
        assert TICKET_ORDER.is_compound
        assert TICKET_ORDER.descending
        assert [str(c) for c in TICKET_ORDER.order_by()] == [
            "tickets.created_at DESC",
            "tickets.id DESC",
        ]

    def test_simple_order_is_ascending_id(self):
        assert not ID_ORDER.is_compound
        assert [str(c) for c in ID_ORDER.order_by()] == ["users.id ASC"]

    def test_simple_continuation(self):
        assert str(ID_ORDER.continuation({"id": 5})) == "users.id > :id_1"

    def test_compound_continuation_breaks_ties_on_id(self):
        sql = str(TICKET_ORDER.continuation({"created_at": BASE, "id": 5}))

        assert "tickets.created_at < " in sql
        assert " OR " in sql
        assert "tickets.created_at = " in sql
        assert "tickets.id < " in sql

    def test_position_of_ticket(self):
        row = Ticket(id=4, created_at=datetime(2026, 5, 1, 12, 0))
        assert TICKET_ORDER.position_of(row) == {"created_at": "2026-05-01T12:00:00Z", "id": 4}


@pytest.mark.unit
class TestClampPageSize:
    def test_default_when_missing(self):
        assert clamp_page_size(None) == 10

    @pytest.mark.parametrize(("requested", "expected"), [(0, 1), (-5, 1), (25, 25), (1000, 100)])
    def test_bounds(self, requested, expected):
        assert clamp_page_size(requested) == expected
