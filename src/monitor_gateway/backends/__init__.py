"""
monitor_gateway.backends

Clients for the collaborators the gateway aggregates over.

Responsibilities:
- HTTP JSON services (check management, notifications, state history).
- DynamoDB result store, cloud provider APIs, service directory and workers.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services depend on these clients, never on httpx/boto3/grpc directly.
