"""
Swagger Manager Backend - Data-Model Validators
=================================================

What:  Explicit constructors/validators for Project and Endpoint field values.
How:   Each validator takes a raw value, normalizes it (trim, case) and
       returns the clean value, or raises ValidationError naming the field.
       `clean_project_fields` / `clean_endpoint_fields` apply them to the
       subset of fields a request actually supplied, so the same code serves
       creation (all fields, defaults filled in) and partial updates
       (only the fields that were present).
Who:   Called by ProjectService and EndpointService before any store mutation.

Presence vs. falsiness:
    A field is applied when its key is present, whatever its value. An
    explicit `""`, `[]` or `False` is a real update. Explicit `None` is only
    accepted where the model is nullable (request_body).
"""

import copy
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from swagger_manager.exceptions import ValidationError

# Canonical order; also the order methods appear in generated path items
HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD")

SECURITY_SCHEMES = ("bearerAuth", "apiKey", "oauth2")

PARAMETER_LOCATIONS = ("query", "path", "header", "cookie")

PROJECT_NAME_MAX_LENGTH = 200
PRINCIPAL_ID_MAX_LENGTH = 128
PATH_MAX_LENGTH = 500
SUMMARY_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

_RESPONSE_KEY_RE = re.compile(r"^([1-5][0-9]{2}|[1-5]XX|default)$")


def default_tags() -> List[str]:
    return ["default"]


def default_responses() -> Dict[str, Any]:
    return {"200": {"description": "Successful response"}}


def default_security() -> List[str]:
    return ["bearerAuth"]


def _require_str(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(
            message=f"'{field}' must be a string",
            field=field,
            context={"type": type(value).__name__},
        )
    return value


# ══════════════════════════════════════════════════════════════════════════
# Project fields
# ══════════════════════════════════════════════════════════════════════════

def validate_project_name(value: Any) -> str:
    name = _require_str(value, "name").strip()
    if not name:
        raise ValidationError(message="Project name is required", field="name")
    if len(name) > PROJECT_NAME_MAX_LENGTH:
        raise ValidationError(
            message=f"Project name must be at most {PROJECT_NAME_MAX_LENGTH} characters",
            field="name",
            context={"length": len(name)},
        )
    return name


def validate_project_description(value: Any) -> str:
    return _require_str(value, "description")


def validate_principal_id(value: Any, field: str = "principal") -> str:
    principal = _require_str(value, field).strip()
    if not principal:
        raise ValidationError(message=f"'{field}' must not be empty", field=field)
    if len(principal) > PRINCIPAL_ID_MAX_LENGTH:
        raise ValidationError(
            message=f"'{field}' must be at most {PRINCIPAL_ID_MAX_LENGTH} characters",
            field=field,
        )
    return principal


def normalize_collaborators(owner_id: str, collaborators: Any) -> List[str]:
    """
    Clean a collaborator list and make sure the owner is a member.

    Duplicates are dropped (first occurrence kept); the owner is placed first
    when the caller left them out.
    """
    if not isinstance(collaborators, list):
        raise ValidationError(
            message="'collaborators' must be a list of principal ids",
            field="collaborators",
        )
    cleaned: List[str] = []
    for raw in collaborators:
        principal = validate_principal_id(raw, field="collaborators")
        if principal not in cleaned:
            cleaned.append(principal)
    if owner_id not in cleaned:
        cleaned.insert(0, owner_id)
    return cleaned


# ══════════════════════════════════════════════════════════════════════════
# Endpoint fields
# ══════════════════════════════════════════════════════════════════════════

def validate_path(value: Any) -> str:
    path = _require_str(value, "path").strip()
    if not path:
        raise ValidationError(message="Path is required", field="path")
    if not path.startswith("/"):
        raise ValidationError(
            message="Path must start with '/'",
            field="path",
            context={"value": path},
        )
    if any(ch.isspace() for ch in path):
        raise ValidationError(
            message="Path must not contain whitespace",
            field="path",
            context={"value": path},
        )
    if len(path) > PATH_MAX_LENGTH:
        raise ValidationError(
            message=f"Path must be at most {PATH_MAX_LENGTH} characters",
            field="path",
        )
    return path


def normalize_method(value: Any) -> str:
    method = _require_str(value, "method").strip().upper()
    if method not in HTTP_METHODS:
        raise ValidationError(
            message=f"'{value}' is not a valid HTTP method",
            field="method",
            context={"allowed": list(HTTP_METHODS)},
        )
    return method


def validate_summary(value: Any) -> str:
    summary = _require_str(value, "summary").strip()
    if not summary:
        raise ValidationError(message="Summary is required", field="summary")
    if len(summary) > SUMMARY_MAX_LENGTH:
        raise ValidationError(
            message=f"Summary must be at most {SUMMARY_MAX_LENGTH} characters",
            field="summary",
            context={"length": len(summary)},
        )
    return summary


def validate_description(value: Any) -> str:
    description = _require_str(value, "description")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            message=f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
            field="description",
            context={"length": len(description)},
        )
    return description


def normalize_tags(value: Any) -> List[str]:
    if not isinstance(value, list):
        raise ValidationError(message="'tags' must be a list of strings", field="tags")
    tags: List[str] = []
    for raw in value:
        tag = _require_str(raw, "tags").strip().lower()
        if not tag:
            raise ValidationError(message="Tags must not be blank", field="tags")
        if tag not in tags:
            tags.append(tag)
    return tags


def validate_parameters(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        raise ValidationError(
            message="'parameters' must be a list of parameter objects",
            field="parameters",
        )
    for index, parameter in enumerate(value):
        if not isinstance(parameter, dict):
            raise ValidationError(
                message=f"Parameter #{index} must be an object",
                field="parameters",
            )
        name = parameter.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(
                message=f"Parameter #{index} needs a non-empty 'name'",
                field="parameters",
            )
        if parameter.get("in") not in PARAMETER_LOCATIONS:
            raise ValidationError(
                message=(
                    f"Parameter '{name}' has invalid 'in' value "
                    f"'{parameter.get('in')}'"
                ),
                field="parameters",
                context={"allowed": list(PARAMETER_LOCATIONS)},
            )
    return copy.deepcopy(value)


def validate_request_body(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError(
            message="'request_body' must be an object or null",
            field="request_body",
        )
    return copy.deepcopy(value)


def validate_responses(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValidationError(
            message="'responses' must map status codes to response objects",
            field="responses",
        )
    if not value:
        raise ValidationError(
            message="At least one response must be documented",
            field="responses",
        )
    for status, descriptor in value.items():
        if not isinstance(status, str) or not _RESPONSE_KEY_RE.match(status):
            raise ValidationError(
                message=f"'{status}' is not a valid response status code",
                field="responses",
            )
        if not isinstance(descriptor, dict):
            raise ValidationError(
                message=f"Response '{status}' must be an object",
                field="responses",
            )
    return copy.deepcopy(value)


def validate_security(value: Any) -> List[str]:
    if not isinstance(value, list):
        raise ValidationError(
            message="'security' must be a list of scheme names",
            field="security",
        )
    schemes: List[str] = []
    for raw in value:
        if raw not in SECURITY_SCHEMES:
            raise ValidationError(
                message=f"'{raw}' is not a supported security scheme",
                field="security",
                context={"allowed": list(SECURITY_SCHEMES)},
            )
        if raw not in schemes:
            schemes.append(raw)
    return schemes


def validate_deprecated(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(message="'deprecated' must be true or false", field="deprecated")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Field-set cleaners
# ══════════════════════════════════════════════════════════════════════════

ENDPOINT_VALIDATORS: Dict[str, Callable[[Any], Any]] = {
    "path": validate_path,
    "method": normalize_method,
    "summary": validate_summary,
    "description": validate_description,
    "tags": normalize_tags,
    "parameters": validate_parameters,
    "request_body": validate_request_body,
    "responses": validate_responses,
    "security": validate_security,
    "deprecated": validate_deprecated,
}

NULLABLE_ENDPOINT_FIELDS = frozenset({"request_body"})

PROJECT_VALIDATORS: Dict[str, Callable[[Any], Any]] = {
    "name": validate_project_name,
    "description": validate_project_description,
}


def _clean(
    values: Dict[str, Any],
    validators: Dict[str, Callable[[Any], Any]],
    nullable: Iterable[str] = (),
) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for field, raw in values.items():
        validator = validators.get(field)
        if validator is None:
            raise ValidationError(message=f"Unknown field '{field}'", field=field)
        if raw is None and field not in nullable:
            raise ValidationError(message=f"'{field}' cannot be null", field=field)
        cleaned[field] = validator(raw)
    return cleaned


def clean_endpoint_fields(values: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and normalize the endpoint fields present in `values`."""
    return _clean(values, ENDPOINT_VALIDATORS, NULLABLE_ENDPOINT_FIELDS)


def clean_project_fields(values: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and normalize name/description present in `values`."""
    return _clean(values, PROJECT_VALIDATORS)
