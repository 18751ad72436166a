"""
monitor_gateway.schema

Wire models shared by backends, services and the API.
"""

# Package marker.
