"""Tests for hopdriver.nodes form serialization and element helpers."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from bs4 import BeautifulSoup

from hopdriver.nodes import Node, click_target, form_fields, form_target, is_submit_control, with_query


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestIsSubmitControl:
    """Tests for is_submit_control()."""

    @pytest.mark.parametrize(
        ("html", "expected"),
        [
            ('<input type="submit"/>', True),
            ('<input type="IMAGE"/>', True),
            ('<input type="text"/>', False),
            ("<input/>", False),
            ("<button>Go</button>", True),
            ('<button type="button">Go</button>', False),
            ('<button type="reset">Go</button>', False),
            ('<a href="/">Go</a>', False),
        ],
    )
    def test_controls(self, html: str, expected: bool) -> None:
        tag = soup(html).find(True)
        assert is_submit_control(tag) is expected


class TestFormFields:
    """Tests for form_fields()."""

    def test_only_clicked_submit_contributes(self) -> None:
        form = soup(
            '<form><input name="a" value="1"/>'
            '<input type="submit" name="s1" value="One"/>'
            '<input type="submit" name="s2" value="Two"/></form>'
        ).form
        second = form.find_all("input")[2]
        assert form_fields(form, second) == [("a", "1"), ("s2", "Two")]
        assert form_fields(form) == [("a", "1")]

    def test_checkbox_default_value_is_on(self) -> None:
        form = soup('<form><input type="checkbox" name="c" checked/></form>').form
        assert form_fields(form) == [("c", "on")]

    def test_unnamed_disabled_and_skipped_inputs(self) -> None:
        form = soup(
            '<form><input value="anon"/>'
            '<input name="d" value="x" disabled/>'
            '<input type="reset" name="r" value="Reset"/>'
            '<input type="file" name="f"/>'
            '<input type="button" name="b" value="B"/></form>'
        ).form
        assert form_fields(form) == []

    def test_select_without_selection_uses_first_option(self) -> None:
        form = soup('<form><select name="s"><option>First</option><option>Second</option></select></form>').form
        assert form_fields(form) == [("s", "First")]

    def test_multiple_select(self) -> None:
        form = soup(
            '<form><select name="s" multiple>'
            '<option value="a" selected>A</option><option value="b">B</option>'
            '<option value="c" selected>C</option></select></form>'
        ).form
        assert form_fields(form) == [("s", "a"), ("s", "c")]

    def test_image_submit_sends_coordinates(self) -> None:
        form = soup('<form><input type="image" name="map"/></form>').form
        assert form_fields(form, form.input) == [("map.x", "0"), ("map.y", "0")]

    def test_textarea(self) -> None:
        form = soup('<form><textarea name="t">line</textarea></form>').form
        assert form_fields(form) == [("t", "line")]


class TestFormTarget:
    """Tests for form_target()."""

    def test_defaults_to_get_on_current_url(self) -> None:
        form = soup("<form></form>").form
        assert form_target(form, None, "http://a.test/page") == ("GET", "http://a.test/page")

    def test_uses_form_attributes(self) -> None:
        form = soup('<form method="post" action="/save"></form>').form
        assert form_target(form, None, "http://a.test/") == ("POST", "/save")

    def test_button_overrides_form(self) -> None:
        doc = soup(
            '<form method="get" action="/a">'
            '<button formmethod="post" formaction="/b">Go</button></form>'
        )
        assert form_target(doc.form, doc.button, "http://a.test/") == ("POST", "/b")


class TestWithQuery:
    def test_replaces_query_and_drops_fragment(self) -> None:
        url = with_query("/search?old=1#frag", [("q", "a b"), ("n", "2")])
        assert url == "/search?q=a+b&n=2"

    def test_empty_fields(self) -> None:
        assert with_query("http://a.test/x", []) == "http://a.test/x"


class TestNode:
    """Tests for the Node wrapper."""

    @pytest.fixture
    def form_doc(self) -> BeautifulSoup:
        return soup(
            '<form id="f" class="a b">'
            '<input type="text" name="t" value="old"/>'
            '<input type="checkbox" name="c" value="yes"/>'
            '<input type="radio" name="r" value="1" checked/>'
            '<input type="radio" name="r" value="2"/>'
            '<textarea name="ta">x</textarea>'
            '<select name="s"><option value="p">P</option><option value="q" selected>Q</option></select>'
            "</form>"
        )

    def test_attribute_access(self, form_doc: BeautifulSoup) -> None:
        node = Node(MagicMock(), form_doc.form)
        assert node["id"] == "f"
        assert node["class"] == "a b"
        assert node["missing"] is None
        assert node.tag_name == "form"
        assert node.form is node

    def test_set_text_value(self, form_doc: BeautifulSoup) -> None:
        node = Node(MagicMock(), form_doc.find("input", attrs={"name": "t"}))
        node.set("new")
        assert node.value == "new"
        assert ("t", "new") in form_fields(form_doc.form)

    def test_set_textarea(self, form_doc: BeautifulSoup) -> None:
        node = Node(MagicMock(), form_doc.textarea)
        node.set("typed")
        assert node.value == "typed"

    def test_select_value(self, form_doc: BeautifulSoup) -> None:
        assert Node(MagicMock(), form_doc.find("select")).value == "q"

    def test_checkbox_toggle_and_set(self, form_doc: BeautifulSoup) -> None:
        node = Node(MagicMock(), form_doc.find("input", attrs={"name": "c"}))
        node.toggle()
        assert node.checked
        node.toggle()
        assert not node.checked
        node.set(True)
        assert node.checked
        node.set(False)
        assert not node.checked

    def test_radio_selection_is_exclusive(self, form_doc: BeautifulSoup) -> None:
        first, second = (Node(MagicMock(), tag) for tag in form_doc.find_all("input", attrs={"name": "r"}))
        second.toggle()
        assert second.checked
        assert not first.checked
        assert ("r", "2") in form_fields(form_doc.form)

    def test_form_of_control(self, form_doc: BeautifulSoup) -> None:
        node = Node(MagicMock(), form_doc.textarea)
        assert node.form is not None
        assert node.form.tag is form_doc.form

    def test_form_of_orphan_is_none(self) -> None:
        assert Node(MagicMock(), soup("<input/>").input).form is None

    def test_click_delegates_to_driver(self, form_doc: BeautifulSoup) -> None:
        driver = MagicMock()
        node = Node(driver, form_doc.textarea)
        result = node.click()
        driver.click.assert_called_once_with(node)
        assert result is driver.click.return_value

    def test_text(self) -> None:
        node = Node(MagicMock(), soup("<p>Hello <b>there</b></p>").p)
        assert node.text == "Hello there"


class TestClickTarget:
    @pytest.mark.parametrize(
        ("html", "expected"),
        [
            ('<a href="/next">n</a>', "/next"),
            ('<a href="http://other.test/">o</a>', "http://other.test/"),
            ('<a href="#top">t</a>', None),
            ("<a>no href</a>", None),
            ('<span href="/x">s</span>', None),
        ],
    )
    def test_targets(self, html: str, expected: str | None) -> None:
        tag = soup(html).find(True)
        assert click_target(Node(MagicMock(), tag)) == expected
