# Services package init
"""
Swagger Manager Backend - Services Layer
==========================================

What:  Business logic between routes (HTTP) and stores (persistence).
How:   Services receive the request's session per call and are created once
       by create_app(), which stores them on app.state.

Service Inventory:
    - validation:          field rules and normalization for projects/endpoints
    - access_control:      owner / collaborator checks
    - swagger_generator:   pure function from (project, endpoints) to OpenAPI 3
    - storage_base:        ArtifactStorage interface
    - artifact_storage:    LocalArtifactStorage (one JSON file per project)
    - artifact_publisher:  regenerate + persist documents, per-project locking
    - project_service:     project CRUD and explicit regeneration
    - endpoint_service:    endpoint CRUD, regenerating after each change
"""
