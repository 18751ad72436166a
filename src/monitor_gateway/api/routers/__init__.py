"""
monitor_gateway.api.routers

Route modules (health, dev auth, query, checks).
"""

# Package marker.
