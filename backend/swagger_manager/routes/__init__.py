# Routes package init
"""
Swagger Manager Backend - API Routes Package
==============================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource.

Route Inventory:
    - projects.py:  /api/projects...            (project CRUD, regeneration, URLs)
    - endpoints.py: /api/endpoints...           (endpoint CRUD)
    - swagger.py:   /swagger-files/{id}         (raw generated document)
                    /api-docs/{id}              (Swagger UI viewer)
    - health.py:    GET /health                 (service health check)
    - dependencies.py: principal header and service lookups

Design Principle:
    Routes stay thin: extract the principal and body, call the service,
    return its result. Business rules live in services/.
"""
