"""Clickable elements found on the current page.

Only the parts of the DOM that drive navigation are modelled: links, form
controls, and form serialization. Lookup uses BeautifulSoup CSS selectors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final
from urllib.parse import urlencode, urlsplit, urlunsplit

from bs4 import Tag

if TYPE_CHECKING:
    from hopdriver.driver import Driver
    from hopdriver.transports.base import Response

_SUBMIT_INPUT_TYPES: Final[frozenset[str]] = frozenset({"submit", "image"})
_SKIPPED_INPUT_TYPES: Final[frozenset[str]] = frozenset({"button", "reset", "file"})
_TEXT_LIKE_MISSING_TYPE = "text"


def _input_type(tag: Tag) -> str:
    return str(tag.get("type") or _TEXT_LIKE_MISSING_TYPE).lower()


def is_submit_control(tag: Tag) -> bool:
    """True for controls that submit their form when clicked."""
    if tag.name == "input":
        return _input_type(tag) in _SUBMIT_INPUT_TYPES
    if tag.name == "button":
        return str(tag.get("type") or "submit").lower() == "submit"
    return False


def _select_values(tag: Tag) -> list[str]:
    options = tag.find_all("option")
    selected = [opt for opt in options if opt.has_attr("selected")]
    if not selected and options and not tag.has_attr("multiple"):
        selected = options[:1]
    return [str(opt.get("value", opt.get_text(strip=True))) for opt in selected]


def form_fields(form: Tag, button: Tag | None = None) -> list[tuple[str, str]]:
    """Serialize a form the way a browser would on submit.

    Args:
        form: The ``<form>`` tag.
        button: The submit control that was clicked, if any. Only this
            control contributes its own name/value.

    Returns:
        Ordered ``(name, value)`` pairs.
    """
    fields: list[tuple[str, str]] = []
    for tag in form.find_all(["input", "textarea", "select", "button"]):
        name = tag.get("name")
        if not name or tag.has_attr("disabled"):
            continue
        name = str(name)

        if tag.name == "textarea":
            fields.append((name, tag.get_text()))
        elif tag.name == "select":
            fields.extend((name, value) for value in _select_values(tag))
        elif tag.name == "button":
            if tag is button:
                fields.append((name, str(tag.get("value", ""))))
        else:
            kind = _input_type(tag)
            if kind in _SUBMIT_INPUT_TYPES:
                if tag is not button:
                    continue
                if kind == "image":
                    fields.extend([(f"{name}.x", "0"), (f"{name}.y", "0")])
                else:
                    fields.append((name, str(tag.get("value", ""))))
            elif kind in ("checkbox", "radio"):
                if tag.has_attr("checked"):
                    fields.append((name, str(tag.get("value", "on"))))
            elif kind not in _SKIPPED_INPUT_TYPES:
                fields.append((name, str(tag.get("value", ""))))
    return fields


def form_target(form: Tag, button: Tag | None, current_url: str) -> tuple[str, str]:
    """Return ``(method, action)`` for submitting *form* via *button*.

    ``formmethod``/``formaction`` on the button win over the form's own
    attributes. A missing action targets the current URL; a missing method
    is GET.
    """
    method = (button.get("formmethod") if button is not None else None) or form.get("method")
    action = (button.get("formaction") if button is not None else None) or form.get("action")
    return str(method or "GET").upper(), str(action or current_url)


def with_query(url: str, fields: list[tuple[str, str]]) -> str:
    """Replace the query string of *url* with the encoded *fields*."""
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=urlencode(fields), fragment=""))


class Node:
    """An element of the driver's current page.

    Attributes:
        driver: The driver whose page this element belongs to.
        tag: Underlying BeautifulSoup tag. Edits through :meth:`set` are made
            on the tag, so they are seen by a later form submit.
    """

    def __init__(self, driver: Driver, tag: Tag) -> None:
        self.driver = driver
        self.tag = tag

    def __repr__(self) -> str:
        return f"<Node {self.tag_name} {self.tag.attrs!r}>"

    def __getitem__(self, name: str) -> str | None:
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    @property
    def tag_name(self) -> str:
        return self.tag.name

    @property
    def text(self) -> str:
        return self.tag.get_text(" ", strip=True)

    @property
    def value(self) -> str | None:
        if self.tag.name == "textarea":
            return self.tag.get_text()
        if self.tag.name == "select":
            values = _select_values(self.tag)
            return values[0] if values else None
        return self["value"]

    @property
    def checked(self) -> bool:
        return self.tag.has_attr("checked")

    @property
    def form(self) -> Node | None:
        """The form this control belongs to, if any."""
        if self.tag.name == "form":
            return self
        parent = self.tag.find_parent("form")
        return Node(self.driver, parent) if parent is not None else None

    def set(self, value: str | bool) -> None:
        """Fill in a text control or (un)check a checkbox/radio."""
        if self.tag.name == "textarea":
            self.tag.string = str(value)
            return
        if self.tag.name == "input" and _input_type(self.tag) in ("checkbox", "radio"):
            if value:
                self._check()
            elif self.tag.has_attr("checked"):
                del self.tag["checked"]
            return
        self.tag["value"] = str(value)

    def _check(self) -> None:
        if _input_type(self.tag) == "radio":
            scope = self.tag.find_parent("form") or self.tag.find_parent()
            for other in scope.find_all("input", attrs={"type": "radio", "name": self.tag.get("name")}):
                if other.has_attr("checked"):
                    del other["checked"]
        self.tag["checked"] = "checked"

    def click(self) -> Response | None:
        """Click this element through its driver.

        Returns:
            The navigation response for links and submit controls, None for
            elements whose click does not navigate.
        """
        return self.driver.click(self)

    def toggle(self) -> None:
        """Flip a checkbox, or select a radio button."""
        if _input_type(self.tag) == "checkbox" and self.checked:
            del self.tag["checked"]
        else:
            self._check()


def click_target(node: Node) -> str | None:
    """Return the link target for an anchor, or None if it does not navigate."""
    if node.tag_name != "a":
        return None
    href = node["href"]
    if href is None or href.startswith("#"):
        return None
    return href
