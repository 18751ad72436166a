"""
monitor_gateway.errors

Typed failures raised across the gateway.

Responsibilities:
- Separate caller-input errors, fatal backend errors, worker-path errors and
  data-integrity errors so each layer can decide to surface or degrade.
"""

from __future__ import annotations


class GatewayError(Exception):
    pass


# --- caller input -----------------------------------------------------------


class QueryInputError(GatewayError):
    pass


class MissingUserError(QueryInputError):
    def __init__(self) -> None:
        super().__init__("error decoding user")


class MissingRegionError(QueryInputError):
    def __init__(self) -> None:
        super().__init__("missing region id")


class MissingVpcError(QueryInputError):
    def __init__(self) -> None:
        super().__init__("missing vpc id")


class MissingInstanceTypeError(QueryInputError):
    def __init__(self) -> None:
        super().__init__("missing instance type - must be one of (ec2, rds)")


class MissingGroupTypeError(QueryInputError):
    def __init__(self) -> None:
        super().__init__("missing group type - must be one of (security, elb, autoscaling)")


class UnknownInstanceMetricTypeError(QueryInputError):
    def __init__(self) -> None:
        super().__init__("no metrics for that instance type")


class UnknownMetricError(QueryInputError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown metric: {name}")
        self.name = name


class CheckInputError(QueryInputError):
    pass


# --- backends ---------------------------------------------------------------


class BackendError(GatewayError):
    """
    A collaborator failed in a way that aborts the current aggregation.
    """

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service


class ResultStoreError(BackendError):
    def __init__(self, message: str) -> None:
        super().__init__("result-store", message)


class StoreIntegrityError(ResultStoreError):
    pass


class ProviderError(BackendError):
    def __init__(self, message: str) -> None:
        super().__init__("cloud-provider", message)


class DirectoryError(BackendError):
    def __init__(self, message: str) -> None:
        super().__init__("service-directory", message)


class PayloadDecodeError(GatewayError):
    pass


# --- workers ----------------------------------------------------------------


class NoWorkersFoundError(GatewayError):
    def __init__(self, routing_key: str) -> None:
        super().__init__("no workers found")
        self.routing_key = routing_key


class WorkerError(GatewayError):
    pass


class WorkerAddressError(WorkerError):
    pass


class WorkerUnavailableError(WorkerError):
    pass


# --- Module Notes -----------------------------------------------------------
# Degradable failures (notification fetch, test-check worker path) are caught by the
# component that sees them and never reach the API layer as these types.
