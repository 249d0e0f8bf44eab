"""Tests for utils.validation module."""

from __future__ import annotations

import pytest
from werkzeug.datastructures import MultiDict

from utils.validation import (
    DEFAULT_DATA_TYPES,
    ProjectForm,
    ValidationError,
    is_valid_url,
)


def valid_data(**overrides):
    data = {
        "name": "Acme products",
        "description": "Catalogue",
        "target_url": "https://acme.test/products",
        "data_types": ["text", "emails"],
    }
    data.update(overrides)
    return data


class TestIsValidUrl:
    @pytest.mark.parametrize("url", ["https://example.com", "http://example.com/a?b=1"])
    def test_accepts_http_urls(self, url):
        assert is_valid_url(url)

    @pytest.mark.parametrize("url", ["example.com", "ftp://example.com", "https://", "", "not a url"])
    def test_rejects_others(self, url):
        assert not is_valid_url(url)


class TestProjectForm:
    def test_fresh_form_defaults(self):
        form = ProjectForm()
        assert form.data_types == DEFAULT_DATA_TYPES
        assert form.max_pages == 10
        assert form.delay_ms == 1000

    def test_from_mapping_strips_and_orders_data_types(self):
        form = ProjectForm.from_mapping(valid_data(name="  Acme  ", data_types=["emails", "text"]))
        assert form.name == "Acme"
        assert form.data_types == ["text", "emails"]
        assert form.validate() is form

    def test_reads_repeated_checkbox_fields(self):
        data = MultiDict([
            ("name", "Acme"),
            ("target_url", "https://acme.test"),
            ("data_types", "links"),
            ("data_types", "prices"),
        ])
        form = ProjectForm.from_mapping(data)
        assert form.data_types == ["links", "prices"]

    def test_single_string_data_type(self):
        form = ProjectForm.from_mapping(valid_data(data_types="links"))
        assert form.data_types == ["links"]

    def test_unparseable_numbers_fall_back_to_defaults(self):
        form = ProjectForm.from_mapping(valid_data(max_pages="lots", delay_ms=None))
        assert form.max_pages == 10
        assert form.delay_ms == 1000

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": "   "}, "Please enter a project name"),
            ({"target_url": ""}, "Please enter a target URL"),
            ({"target_url": "acme.test"}, "Please enter a valid URL"),
            ({"data_types": []}, "Please select at least one data type to extract"),
            ({"data_types": ["text", "videos"]}, "Unknown data type: videos"),
            ({"max_pages": 0}, "Max pages must be between 1 and 1000"),
            ({"delay_ms": 20000}, "Delay must be between 500 and 10000 ms"),
        ],
    )
    def test_validation_messages(self, overrides, message):
        form = ProjectForm.from_mapping(valid_data(**overrides))
        with pytest.raises(ValidationError, match=message):
            form.validate()

    def test_name_checked_before_url(self):
        form = ProjectForm.from_mapping(valid_data(name="", target_url="", data_types=[]))
        with pytest.raises(ValidationError, match="Please enter a project name"):
            form.validate()

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)
