"""
pytest suite for the Storefront Admin API.

Test categories:
- unit: status rules, discount maths, settings, auth helpers
- integration: services against in-memory SQLite
- api: FastAPI routes through httpx's ASGI transport
"""
