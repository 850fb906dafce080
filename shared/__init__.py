"""Shared package for the meter application survey service.

This package contains the code shared by the Flask API, the maintenance CLI
and the tests:

- Database models (models.py) - SQLAlchemy models for applications and their survey responses
- Enums (enums.py) - Image slots and report grouping fields
- Validation utilities (validation.py, schemas.py) - Input validation, sanitization and serialization
"""
