"""Unit tests for graph/models.py — page parsing and collection accumulation."""

import json

import pytest

from shared_items.graph.errors import ParseError
from shared_items.graph.models import GraphPage, ItemCollection, parse_page

# ---------------------------------------------------------------------------
# parse_page tests
# ---------------------------------------------------------------------------


class TestParsePage:
    def test_parses_items_and_next_link(self) -> None:
        body = json.dumps(
            {
                "value": [{"id": "a"}, {"id": "b"}],
                "@odata.nextLink": "https://graph.microsoft.com/v1.0/me/drive/following?skip=2",
            }
        )
        page = parse_page(body)
        assert page.items == [{"id": "a"}, {"id": "b"}]
        assert page.next_link == "https://graph.microsoft.com/v1.0/me/drive/following?skip=2"
        assert page.has_next is True

    def test_accepts_bytes(self) -> None:
        page = parse_page(b'{"value": [{"id": "x"}]}')
        assert page.items == [{"id": "x"}]

    def test_items_passed_through_unchanged(self) -> None:
        item = {
            "id": "01ABC",
            "name": "Budget.xlsx",
            "remoteItem": {"parentReference": {"driveId": "b!xyz"}, "size": 1024},
            "file": {"mimeType": "application/vnd.ms-excel"},
        }
        page = parse_page(json.dumps({"value": [item]}))
        assert page.items == [item]

    def test_missing_next_link_is_last_page(self) -> None:
        page = parse_page('{"value": [{"id": "a"}]}')
        assert page.next_link is None
        assert page.has_next is False

    def test_null_next_link_is_last_page(self) -> None:
        page = parse_page('{"value": [], "@odata.nextLink": null}')
        assert page.next_link is None

    def test_empty_next_link_is_last_page(self) -> None:
        page = parse_page('{"value": [], "@odata.nextLink": ""}')
        assert page.next_link is None
        assert page.has_next is False

    def test_missing_value_means_no_items(self) -> None:
        page = parse_page('{"@odata.context": "https://graph.microsoft.com/v1.0/$metadata"}')
        assert page.items == []

    def test_null_value_means_no_items(self) -> None:
        page = parse_page('{"value": null}')
        assert page.items == []

    def test_cursor_with_empty_items_is_valid(self) -> None:
        page = parse_page('{"value": [], "@odata.nextLink": "/me/drive/following?skip=5"}')
        assert page.items == []
        assert page.has_next is True

    def test_invalid_json_raises_parse_error(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_page("<html>Service Unavailable</html>")
        assert exc_info.value.body == "<html>Service Unavailable</html>"
        assert "invalid JSON" in exc_info.value.detail

    def test_non_object_raises_parse_error(self) -> None:
        with pytest.raises(ParseError, match="expected a JSON object"):
            parse_page("[1, 2, 3]")

    def test_value_not_array_raises_parse_error(self) -> None:
        with pytest.raises(ParseError, match="'value' must be an array"):
            parse_page('{"value": {"id": "a"}}')

    def test_value_entry_not_object_raises_parse_error(self) -> None:
        with pytest.raises(ParseError, match=r"'value\[1\]' must be an object"):
            parse_page('{"value": [{"id": "a"}, "b"]}')

    def test_next_link_not_string_raises_parse_error(self) -> None:
        with pytest.raises(ParseError, match="must be a string"):
            parse_page('{"value": [], "@odata.nextLink": 42}')

    def test_deeply_nested_body_raises_parse_error(self) -> None:
        body = "[" * 100_000 + "]" * 100_000
        with pytest.raises(ParseError) as exc_info:
            parse_page(body)
        assert exc_info.value.body == body


# ---------------------------------------------------------------------------
# GraphPage / ItemCollection tests
# ---------------------------------------------------------------------------


class TestGraphPage:
    def test_defaults(self) -> None:
        page = GraphPage()
        assert page.items == []
        assert page.next_link is None
        assert page.has_next is False


class TestItemCollection:
    def test_empty_by_default(self) -> None:
        collection = ItemCollection()
        assert len(collection) == 0
        assert list(collection) == []

    def test_extend_preserves_page_then_item_order(self) -> None:
        collection = ItemCollection()
        collection.extend(GraphPage(items=[{"id": "1"}, {"id": "2"}], next_link="/next"))
        collection.extend(GraphPage(items=[]))
        collection.extend(GraphPage(items=[{"id": "3"}]))
        assert [item["id"] for item in collection] == ["1", "2", "3"]
        assert len(collection) == 3

    def test_items_default_factory_independent(self) -> None:
        """Each ItemCollection instance must have its own items list."""
        a = ItemCollection()
        b = ItemCollection()
        a.items.append({"id": "x"})
        assert b.items == []
