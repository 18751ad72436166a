"""
monitor_gateway.query

Fixed-shape query resolution.

Responsibilities:
- Per-query context (user, region, vpc).
- Resolvers for the `checks` and `region -> vpc -> instances/groups` shapes.
- An executor that walks a query document and records field-scoped errors.
"""

# Package marker.
