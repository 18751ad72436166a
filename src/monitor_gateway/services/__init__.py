"""
monitor_gateway.services

Service layer.

Responsibilities:
- Check aggregation (checks + notifications + results) and the batch write path.
- On-demand test-check dispatch to workers.
"""

# Package marker.
