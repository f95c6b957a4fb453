"""Form autofill and request synthesis.

A form is turned into exactly one request: fields are collected, filled with
plausible sample values, and encoded for the form's method and enctype.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import logging
import re
from typing import TYPE_CHECKING, Any, Iterable, Mapping
from urllib.parse import urlencode

from urllib3.fields import RequestField
from urllib3.filepost import encode_multipart_formdata

from .constants import DEFAULT_FORM_ENCTYPE, DEFAULT_METHOD, MULTIPART_ENCTYPE_PREFIX
from .document import Element
from .types import FormInput, NavigationRequest, RequestSource
from .url import merge_query

if TYPE_CHECKING:
    from .types import NavigationResponse

LOGGER = logging.getLogger(__name__)

FORM_FIELD_SELECTOR = "input, textarea, select"

# Inputs that never carry a value in a synthesized submission.
UNSUBMITTED_INPUT_TYPES = frozenset({"button", "file", "image", "reset"})


@dataclass(frozen=True, slots=True)
class FormFillData:
    """Sample values used to fill form fields."""

    email: str = "linkscope@example.com"
    color: str = "#e66465"
    password: str = "LinkscopeP@ssw0rd1"
    phone: str = "2124567890"
    placeholder: str = "linkscope"
    url: str = "https://example.com"
    number: str = "1"
    date: str = "2024-01-01"
    time: str = "12:00"
    datetime: str = "2024-01-01T12:00"
    month: str = "2024-01"
    week: str = "2024-W01"
    search: str = "linkscope"
    username: str = "linkscope"
    first_name: str = "Jane"
    last_name: str = "Doe"
    address: str = "1 Main Street"
    city: str = "Springfield"
    zip_code: str = "10001"
    company: str = "Example Inc"

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "FormFillData":
        """Defaults overridden by any known keys in `payload`."""

        if not payload:
            return cls()
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(payload) - known)
        if unknown:
            raise ValueError(f"Unknown form fill keys: {unknown}")
        return replace(cls(), **{str(key): str(value) for key, value in payload.items()})

    def to_dict(self) -> dict[str, str]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


DEFAULT_FORM_FILL_DATA = FormFillData()

# Input type -> FormFillData attribute.
TYPE_FILL_TABLE: dict[str, str] = {
    "email": "email",
    "color": "color",
    "password": "password",
    "tel": "phone",
    "url": "url",
    "number": "number",
    "range": "number",
    "date": "date",
    "time": "time",
    "datetime-local": "datetime",
    "datetime": "datetime",
    "month": "month",
    "week": "week",
    "search": "search",
}

# Field name / autocomplete hint -> FormFillData attribute, first match wins.
NAME_FILL_TABLE: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), attribute)
    for pattern, attribute in (
        (r"e-?mail", "email"),
        (r"pass(?:word|wd)?|pwd", "password"),
        (r"phone|mobile|\btel\b|fax", "phone"),
        (r"url|website|homepage", "url"),
        (r"zip|postal|postcode", "zip_code"),
        (r"first.?name|given.?name|fname", "first_name"),
        (r"last.?name|family.?name|surname|lname", "last_name"),
        (r"user(?:.?name)?|login|nick", "username"),
        (r"city|town", "city"),
        (r"address|street", "address"),
        (r"company|organi[sz]ation", "company"),
        (r"search|query|keyword|^q$", "search"),
        (r"colou?r", "color"),
        (r"birth|dob|date", "date"),
        (r"amount|qty|quantity|count|number|num", "number"),
    )
)


def _hint_value(text: str, data: FormFillData) -> str:
    if not text:
        return ""
    for pattern, attribute in NAME_FILL_TABLE:
        if pattern.search(text):
            return getattr(data, attribute)
    return ""


def suggest_value(field_input: FormInput, data: FormFillData = DEFAULT_FORM_FILL_DATA) -> str:
    """Infer a sample value for one empty field."""

    if field_input.type in ("number", "range"):
        minimum = field_input.attributes.get("min", "").strip()
        if minimum and re.fullmatch(r"-?\d+(?:\.\d+)?", minimum):
            return minimum

    attribute = TYPE_FILL_TABLE.get(field_input.type)
    if attribute:
        return getattr(data, attribute)

    for hint in (field_input.autocomplete, field_input.name):
        value = _hint_value(hint, data)
        if value:
            return value

    if field_input.type == "hidden":
        return ""
    return data.placeholder


def fill_suggestions(
    inputs: Iterable[FormInput],
    data: FormFillData = DEFAULT_FORM_FILL_DATA,
) -> dict[str, str]:
    """Map field names to values for a synthesized submission.

    Values already present on the page win. Radio groups submit the checked
    (or first) option, checkboxes their value or `on`, selects their selected
    (or first) option. Remaining fields are filled by type, then by name hint,
    then with the placeholder value.
    """

    candidates = [item for item in inputs if item.type not in UNSUBMITTED_INPUT_TYPES]
    filled: dict[str, str] = {}
    checked_radios: set[str] = set()

    for item in candidates:
        if item.type == "radio":
            checked = "checked" in item.attributes
            if item.name in checked_radios:
                continue
            if item.name not in filled or checked:
                filled[item.name] = item.value or "on"
            if checked:
                checked_radios.add(item.name)
        elif item.type == "checkbox":
            filled[item.name] = item.value or "on"
        elif item.type == "select":
            filled[item.name] = item.value or next((opt for opt in item.options if opt), "")
        elif item.has_value:
            filled[item.name] = item.value

    for item in candidates:
        # Submit buttons only contribute a value they already carry.
        if item.name in filled or item.type in ("radio", "checkbox", "select", "submit"):
            continue
        filled[item.name] = suggest_value(item, data)

    return {key: value for key, value in filled.items() if key and value}


def encode_urlencoded(values: Mapping[str, str]) -> str:
    return urlencode(sorted(values.items()))


def encode_multipart(values: Mapping[str, str]) -> tuple[str, str]:
    """Encode `values` as multipart/form-data; returns `(body, content_type)`.

    A field that cannot be rendered is left out of the body.
    """

    parts: list[RequestField] = []
    for key, value in sorted(values.items()):
        try:
            part = RequestField(name=key, data=value)
            part.make_multipart()
            # Encode the part alone so one bad field cannot fail the whole body.
            encode_multipart_formdata([part])
        except (TypeError, ValueError, UnicodeError) as exc:
            LOGGER.debug("Skipping multipart field %r: %s", key, exc)
            continue
        parts.append(part)

    body, content_type = encode_multipart_formdata(parts)
    return body.decode("utf-8", errors="replace"), content_type


class FormFiller:
    """Build one request per HTML form. Holds no mutable state."""

    __slots__ = ("data",)

    def __init__(self, data: FormFillData | None = None) -> None:
        self.data = data or DEFAULT_FORM_FILL_DATA

    def collect_inputs(self, form: Element) -> list[FormInput]:
        return [FormInput.from_element(element) for element in form.select(FORM_FIELD_SELECTOR)]

    def fill(self, inputs: Iterable[FormInput]) -> dict[str, str]:
        return fill_suggestions(inputs, self.data)

    def build_request(
        self,
        form: Element,
        response: "NavigationResponse",
    ) -> NavigationRequest | None:
        """Synthesize the submission request for `form`, or `None` to skip it."""

        action = form.attr("action")
        if action is None:
            return None

        # An empty action submits to the page itself.
        action_url = response.resolve_url(action.strip() or response.url)
        if not action_url:
            LOGGER.debug("Skipping form with unresolvable action %r on %s", action, response.url)
            return None

        enctype = (form.attr("enctype") or "").strip() or DEFAULT_FORM_ENCTYPE
        method = (form.attr("method") or "").strip().upper() or DEFAULT_METHOD

        values = self.fill(self.collect_inputs(form))

        if method == "GET":
            return NavigationRequest(
                url=merge_query(action_url, encode_urlencoded(values)),
                depth=response.depth + 1,
                source=RequestSource.FORM,
                method=method,
            )

        if enctype.lower().startswith(MULTIPART_ENCTYPE_PREFIX):
            body, content_type = encode_multipart(values)
        else:
            body, content_type = encode_urlencoded(values), enctype

        return NavigationRequest(
            url=action_url,
            depth=response.depth + 1,
            source=RequestSource.FORM,
            method=method,
            body=body,
            headers={"Content-Type": content_type},
        )


__all__ = [
    "DEFAULT_FORM_FILL_DATA",
    "FORM_FIELD_SELECTOR",
    "FormFillData",
    "FormFiller",
    "NAME_FILL_TABLE",
    "TYPE_FILL_TABLE",
    "UNSUBMITTED_INPUT_TYPES",
    "encode_multipart",
    "encode_urlencoded",
    "fill_suggestions",
    "suggest_value",
]
