"""
Service layer: framework-agnostic stores and the auth orchestrator.

Blueprints build these per request from the scoped DBStorage session, so no
credential state lives at process level.
"""
