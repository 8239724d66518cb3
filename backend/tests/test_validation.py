"""
Swagger Manager Backend - Validation Unit Tests
=================================================

What we test:
    ✅ Path, method, summary rules
    ✅ Tag / security / response normalization
    ✅ Present-vs-absent semantics of the field cleaners
    ✅ Collaborator normalization keeps the owner
"""

import pytest

from swagger_manager.exceptions import ValidationError
from swagger_manager.services.validation import (
    clean_endpoint_fields,
    clean_project_fields,
    normalize_collaborators,
    normalize_method,
    normalize_tags,
    validate_parameters,
    validate_path,
    validate_responses,
    validate_security,
    validate_summary,
)


class TestEndpointFieldRules:

    def test_path_must_start_with_slash(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_path("items")
        assert exc_info.value.field == "path"

    def test_path_rejects_whitespace(self):
        with pytest.raises(ValidationError):
            validate_path("/items/{id} /x")

    def test_path_is_stripped(self):
        assert validate_path("  /items/{id} ") == "/items/{id}"

    def test_method_is_upper_cased(self):
        assert normalize_method("get") == "GET"
        assert normalize_method(" Patch ") == "PATCH"

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_method("FETCH")
        assert "GET" in exc_info.value.context["allowed"]

    def test_summary_required_and_bounded(self):
        with pytest.raises(ValidationError):
            validate_summary("   ")
        with pytest.raises(ValidationError):
            validate_summary("x" * 201)
        assert validate_summary("x" * 200) == "x" * 200

    def test_tags_lower_cased_and_deduplicated(self):
        assert normalize_tags(["Items", "items", " Admin "]) == ["items", "admin"]

    def test_empty_tag_list_is_allowed(self):
        assert normalize_tags([]) == []

    def test_blank_tag_rejected(self):
        with pytest.raises(ValidationError):
            normalize_tags(["ok", "  "])

    def test_parameters_need_name_and_location(self):
        assert validate_parameters([{"name": "id", "in": "path", "required": True}])
        with pytest.raises(ValidationError):
            validate_parameters([{"in": "query"}])
        with pytest.raises(ValidationError):
            validate_parameters([{"name": "id", "in": "body"}])

    def test_responses_keys(self):
        ok = {"200": {"description": "OK"}, "4XX": {"description": "Client"}, "default": {}}
        assert validate_responses(ok) == ok
        with pytest.raises(ValidationError):
            validate_responses({})
        with pytest.raises(ValidationError):
            validate_responses({"600": {"description": "??"}})
        with pytest.raises(ValidationError):
            validate_responses({"200": "OK"})

    def test_security_enum_and_order(self):
        assert validate_security(["oauth2", "apiKey", "oauth2"]) == ["oauth2", "apiKey"]
        assert validate_security([]) == []
        with pytest.raises(ValidationError):
            validate_security(["basicAuth"])


class TestFieldCleaners:

    def test_only_present_fields_are_returned(self):
        cleaned = clean_endpoint_fields({"method": "delete", "deprecated": False})
        assert cleaned == {"method": "DELETE", "deprecated": False}

    def test_falsy_values_are_kept(self):
        cleaned = clean_endpoint_fields({"tags": [], "description": "", "parameters": []})
        assert cleaned == {"tags": [], "description": "", "parameters": []}

    def test_null_request_body_is_allowed(self):
        assert clean_endpoint_fields({"request_body": None}) == {"request_body": None}

    def test_null_for_other_fields_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_endpoint_fields({"summary": None})
        assert exc_info.value.field == "summary"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            clean_endpoint_fields({"operationId": "listItems"})

    def test_project_name_is_stripped(self):
        assert clean_project_fields({"name": "  Shop API "}) == {"name": "Shop API"}

    def test_project_name_required(self):
        with pytest.raises(ValidationError):
            clean_project_fields({"name": ""})


class TestCollaborators:

    def test_owner_added_first_when_missing(self):
        assert normalize_collaborators("U1", ["U2", "U3"]) == ["U1", "U2", "U3"]

    def test_owner_position_kept_when_present(self):
        assert normalize_collaborators("U1", ["U2", "U1"]) == ["U2", "U1"]

    def test_duplicates_dropped(self):
        assert normalize_collaborators("U1", ["U2", "U2", "U1"]) == ["U2", "U1"]

    def test_empty_list_leaves_owner(self):
        assert normalize_collaborators("U1", []) == ["U1"]

    def test_blank_principal_rejected(self):
        with pytest.raises(ValidationError):
            normalize_collaborators("U1", ["  "])
