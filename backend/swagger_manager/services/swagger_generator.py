"""
Swagger Manager Backend - Swagger Document Generator
======================================================

What:  Pure transform (Project, [Endpoint]) → OpenAPI 3.0.3 document (dict).
How:   Endpoints are grouped by path; each path item holds one operation per
       HTTP method. Structured fields are deep-copied from the records, so the
       document never aliases stored data.
Who:   Called by ArtifactPublisher.regenerate() and by tests directly.

Determinism:
    The same project + endpoint set always yields the same document: paths
    are sorted, methods follow HTTP_METHODS order, tag and scheme lists are
    sorted, and nothing time-dependent is written.

Duplicate (path, method):
    Should the store ever hold two records for one route, the record with
    the latest updated_at wins (then created_at, then id). Nothing is raised.
"""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from swagger_manager.services.validation import HTTP_METHODS

OPENAPI_VERSION = "3.0.3"
DEFAULT_DOCUMENT_VERSION = "1.0.0"

# Definitions emitted under components.securitySchemes for referenced names
SECURITY_SCHEME_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    "bearerAuth": {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    },
    "apiKey": {
        "type": "apiKey",
        "in": "header",
        "name": "X-API-Key",
    },
    "oauth2": {
        "type": "oauth2",
        "flows": {
            "clientCredentials": {
                "tokenUrl": "/oauth/token",
                "scopes": {},
            },
        },
    },
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _as_utc(value: Optional[datetime]) -> datetime:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _recency_key(endpoint: Any):
    return (
        _as_utc(getattr(endpoint, "updated_at", None)),
        _as_utc(getattr(endpoint, "created_at", None)),
        str(getattr(endpoint, "id", "")),
    )


def select_effective_endpoints(endpoints: Iterable[Any]) -> Dict[tuple, Any]:
    """
    Map each (path, METHOD) to the record that represents it.

    Records are visited oldest to newest, so for duplicates the most
    recently updated one overwrites the others.
    """
    effective: Dict[tuple, Any] = {}
    for endpoint in sorted(endpoints, key=_recency_key):
        effective[(endpoint.path, endpoint.method.upper())] = endpoint
    return effective


def build_operation(endpoint: Any) -> Dict[str, Any]:
    """OpenAPI operation object for one endpoint record."""
    operation: Dict[str, Any] = {
        "summary": endpoint.summary,
        "description": endpoint.description or "",
        "tags": list(endpoint.tags),
        "parameters": copy.deepcopy(endpoint.parameters),
    }
    if endpoint.request_body is not None:
        operation["requestBody"] = copy.deepcopy(endpoint.request_body)
    operation["responses"] = copy.deepcopy(endpoint.responses)
    operation["security"] = [{scheme: []} for scheme in endpoint.security]
    operation["deprecated"] = bool(endpoint.deprecated)
    return operation


def generate_swagger_document(
    project: Any,
    endpoints: Iterable[Any],
    server_url: Optional[str] = None,
    version: str = DEFAULT_DOCUMENT_VERSION,
) -> Dict[str, Any]:
    """
    Build the OpenAPI document for `project` from its complete endpoint set.

    Args:
        project:    Object with `name` and `description`
        endpoints:  Every endpoint record of the project (any order)
        server_url: Written as the single `servers` entry when given
        version:    `info.version` of the document

    Returns:
        Dict ready for JSON serialization.
    """
    effective = select_effective_endpoints(endpoints)
    method_rank = {method: rank for rank, method in enumerate(HTTP_METHODS)}

    paths: Dict[str, Dict[str, Any]] = {}
    for path, method in sorted(
        effective,
        key=lambda route: (route[0], method_rank.get(route[1], len(HTTP_METHODS))),
    ):
        paths.setdefault(path, {})[method.lower()] = build_operation(effective[(path, method)])

    used_tags = sorted({tag for endpoint in effective.values() for tag in endpoint.tags})
    used_schemes = sorted({scheme for endpoint in effective.values() for scheme in endpoint.security})

    document: Dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": project.name,
            "description": project.description or "",
            "version": version,
        },
    }
    if server_url:
        document["servers"] = [{"url": server_url}]
    document["tags"] = [{"name": tag} for tag in used_tags]
    document["paths"] = paths
    document["components"] = {
        "securitySchemes": {
            scheme: copy.deepcopy(SECURITY_SCHEME_DEFINITIONS[scheme])
            for scheme in used_schemes
            if scheme in SECURITY_SCHEME_DEFINITIONS
        },
    }
    return document


def list_operations(document: Dict[str, Any]) -> List[tuple]:
    """(path, method) pairs present in a generated document, in document order."""
    return [
        (path, method)
        for path, item in document.get("paths", {}).items()
        for method in item
    ]
