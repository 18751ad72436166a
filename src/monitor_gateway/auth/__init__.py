"""
monitor_gateway.auth

Authentication package.

Responsibilities:
- JWT helpers and validation.
- FastAPI dependency that turns a bearer token into the calling `User`.
"""

# Package marker.
