"""
monitor_gateway.api

HTTP API package.

Responsibilities:
- FastAPI app factory, dependencies and routers.
"""

# Package marker.
