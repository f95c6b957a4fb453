"""Tests for form field filling and request synthesis."""

from __future__ import annotations

import logging

import pytest

from linkscope.formfill import (
    DEFAULT_FORM_FILL_DATA,
    FormFillData,
    FormFiller,
    encode_multipart,
    fill_suggestions,
    suggest_value,
)
from linkscope.parsers import FormStrategy
from linkscope.types import FormInput

DATA = DEFAULT_FORM_FILL_DATA


def _form(make_response, markup: str, **kwargs):
    response = make_response(f"<html><body>{markup}</body></html>", **kwargs)
    forms = response.select("form")
    assert forms, "fixture markup has no form"
    return forms[0], response


class TestFillSuggestions:
    def test_fill_by_input_type(self):
        inputs = [
            FormInput(name="contact", type="email"),
            FormInput(name="secret", type="password"),
            FormInput(name="fav", type="color"),
            FormInput(name="mobile", type="tel"),
            FormInput(name="when", type="date"),
        ]
        assert fill_suggestions(inputs) == {
            "contact": DATA.email,
            "secret": DATA.password,
            "fav": DATA.color,
            "mobile": DATA.phone,
            "when": DATA.date,
        }

    def test_fill_by_field_name_hint(self):
        inputs = [
            FormInput(name="user_email"),
            FormInput(name="zipcode"),
            FormInput(name="q"),
            FormInput(name="first_name"),
            FormInput(name="anything_else"),
        ]
        filled = fill_suggestions(inputs)
        assert filled["user_email"] == DATA.email
        assert filled["zipcode"] == DATA.zip_code
        assert filled["q"] == DATA.search
        assert filled["first_name"] == DATA.first_name
        assert filled["anything_else"] == DATA.placeholder

    def test_autocomplete_hint_wins_over_name(self):
        field = FormInput(name="f1", autocomplete="email")
        assert suggest_value(field) == DATA.email

    def test_existing_values_are_kept(self):
        inputs = [
            FormInput(name="token", type="hidden", value="abc123"),
            FormInput(name="email", type="email", value="me@site.test"),
        ]
        assert fill_suggestions(inputs) == {"token": "abc123", "email": "me@site.test"}

    def test_empty_keys_and_values_are_dropped(self):
        inputs = [
            FormInput(name="", type="text"),
            FormInput(name="csrf", type="hidden"),
            FormInput(name="go", type="submit"),
            FormInput(name="upload", type="file"),
            FormInput(name="reset", type="reset", value="Reset"),
        ]
        assert fill_suggestions(inputs) == {}

    def test_radio_group_prefers_checked_option(self):
        inputs = [
            FormInput(name="size", type="radio", value="s"),
            FormInput(name="size", type="radio", value="m", attributes={"checked": ""}),
            FormInput(name="size", type="radio", value="l"),
            FormInput(name="color", type="radio", value="red"),
            FormInput(name="color", type="radio", value="blue"),
        ]
        assert fill_suggestions(inputs) == {"size": "m", "color": "red"}

    def test_checkbox_and_select(self):
        inputs = [
            FormInput(name="agree", type="checkbox"),
            FormInput(name="news", type="checkbox", value="yes"),
            FormInput(name="country", type="select", options=("", "us", "ca")),
            FormInput(name="lang", type="select", value="fr", options=("en", "fr")),
        ]
        assert fill_suggestions(inputs) == {
            "agree": "on",
            "news": "yes",
            "country": "us",
            "lang": "fr",
        }

    def test_number_uses_min_attribute(self):
        field = FormInput(name="qty", type="number", attributes={"min": "5"})
        assert suggest_value(field) == "5"
        assert suggest_value(FormInput(name="qty", type="number")) == DATA.number

    def test_custom_fill_data(self):
        data = FormFillData.from_dict({"email": "qa@corp.test"})
        assert fill_suggestions([FormInput(name="e", type="email")], data) == {"e": "qa@corp.test"}

    def test_unknown_fill_data_key(self):
        with pytest.raises(ValueError, match="Unknown form fill keys"):
            FormFillData.from_dict({"nope": "x"})


class TestBuildRequest:
    def test_method_defaults_to_get_with_fields_in_query(self, make_response):
        form, response = _form(make_response, '<form action="/search"><input name="q"></form>')
        request = FormFiller().build_request(form, response)

        assert request is not None
        assert request.method == "GET"
        assert request.url == "https://example.com/search?q=linkscope"
        assert request.body is None
        assert request.headers == {}
        assert request.source == "form"
        assert request.depth == 1

    def test_get_keeps_existing_action_query(self, make_response):
        form, response = _form(
            make_response,
            '<form action="/s?lang=en" method="get"><input name="q"></form>',
        )
        request = FormFiller().build_request(form, response)
        assert request.url == "https://example.com/s?lang=en&q=linkscope"

    def test_post_urlencoded(self, make_response):
        form, response = _form(
            make_response,
            '<form action="login" method="post">'
            '<input type="email" name="email"><input type="password" name="pass">'
            '<input type="submit" value="Log in"></form>',
        )
        request = FormFiller().build_request(form, response)

        assert request.method == "POST"
        assert request.url == "https://example.com/dir/login"
        assert request.body == "email=linkscope%40example.com&pass=LinkscopeP%40ssw0rd1"
        assert request.headers == {"Content-Type": "application/x-www-form-urlencoded"}

    def test_post_keeps_declared_enctype(self, make_response):
        form, response = _form(
            make_response,
            '<form action="/t" method="POST" enctype="text/plain"><input name="a" value="1"></form>',
        )
        request = FormFiller().build_request(form, response)
        assert request.headers == {"Content-Type": "text/plain"}
        assert request.body == "a=1"

    def test_multipart_boundary_matches_body(self, make_response):
        form, response = _form(
            make_response,
            '<form action="/upload" method="post" enctype="multipart/form-data">'
            '<input name="title" value="hello"><textarea name="notes">some text</textarea>'
            "</form>",
        )
        request = FormFiller().build_request(form, response)

        content_type = request.headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")
        boundary = content_type.split("boundary=", 1)[1]
        assert request.body.startswith(f"--{boundary}\r\n")
        assert request.body.endswith(f"--{boundary}--\r\n")
        assert 'name="title"' in request.body
        assert "hello" in request.body
        assert 'name="notes"' in request.body
        assert "some text" in request.body

    def test_put_method_carries_body(self, make_response):
        form, response = _form(
            make_response,
            '<form action="/item" method="put"><input name="id" value="7"></form>',
        )
        request = FormFiller().build_request(form, response)
        assert request.method == "PUT"
        assert request.body == "id=7"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_missing_action_is_skipped(self, make_response):
        form, response = _form(make_response, '<form method="post"><input name="a"></form>')
        assert FormFiller().build_request(form, response) is None

    def test_unresolvable_action_is_skipped(self, make_response):
        form, response = _form(make_response, '<form action="javascript:void(0)"></form>')
        assert FormFiller().build_request(form, response) is None

    def test_empty_action_submits_to_page(self, make_response):
        form, response = _form(make_response, '<form action=""><input name="q"></form>')
        request = FormFiller().build_request(form, response)
        assert request.url == "https://example.com/dir/page.html?q=linkscope"

    def test_zero_fields_get(self, make_response):
        form, response = _form(make_response, '<form action="/submit"></form>')
        request = FormFiller().build_request(form, response)
        assert request.url == "https://example.com/submit"
        assert request.body is None

    def test_zero_fields_post(self, make_response):
        form, response = _form(make_response, '<form action="/submit" method="post"></form>')
        request = FormFiller().build_request(form, response)
        assert request.url == "https://example.com/submit"
        assert request.body == ""

    def test_select_and_textarea_are_collected(self, make_response):
        form, response = _form(
            make_response,
            '<form action="/f">'
            '<select name="country"><option value="us">US</option>'
            '<option value="ca" selected>CA</option></select>'
            '<textarea name="comment"></textarea>'
            "</form>",
        )
        request = FormFiller().build_request(form, response)
        assert request.url == "https://example.com/f?comment=linkscope&country=ca"


def test_encode_multipart_without_fields():
    body, content_type = encode_multipart({})
    boundary = content_type.split("boundary=", 1)[1]
    assert body == f"--{boundary}--\r\n"


def test_encode_multipart_skips_unencodable_field(caplog):
    with caplog.at_level(logging.DEBUG, logger="linkscope.formfill"):
        body, content_type = encode_multipart({"ok": "1", "bad": "\ud800"})

    boundary = content_type.split("boundary=", 1)[1]
    assert 'name="ok"' in body
    assert 'name="bad"' not in body
    assert body.endswith(f"--{boundary}--\r\n")
    assert "Skipping multipart field 'bad'" in caplog.text


def test_unencodable_multipart_value_does_not_drop_later_forms(make_response):
    response = make_response(
        '<form action="/upload" method="post" enctype="multipart/form-data">'
        '<input type="email" name="mail"><input name="note" value="x"></form>'
        '<form action="/later"></form>'
    )
    strategy = FormStrategy(FormFiller(FormFillData(email="\ud800")))

    requests = list(strategy.extract(response))

    assert [(r.method, r.url) for r in requests] == [
        ("POST", "https://example.com/upload"),
        ("GET", "https://example.com/later"),
    ]
    assert 'name="note"' in requests[0].body
    assert 'name="mail"' not in requests[0].body
