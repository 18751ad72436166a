"""
monitor_gateway.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Strict env-driven configuration, defaults safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="MONITOR_GATEWAY_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "monitor-gateway"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "monitor-gateway"
    jwt_audience: str = "monitor-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # HTTP backends
    check_service_url: str = "http://localhost:9101"
    notification_service_url: str = "http://localhost:9102"
    state_history_url: str = "http://localhost:9103"
    backend_timeout_seconds: float = 10.0

    # Result store (DynamoDB)
    aws_region: str = "us-west-2"
    dynamodb_endpoint_url: str | None = None
    check_result_table: str = "check_results"
    check_result_check_id_index: str = "check_id-index"
    check_result_customer_id_index: str = "customer_id-index"
    check_response_table: str = "check_responses"
    response_payload_attribute: str = "response_payload"

    # Service directory (etcd v2 keys API)
    directory_url: str = "http://localhost:2379"
    directory_route_path: str = "/opsee.co/routes"
    shared_execution_group: str = "127a7354-290e-11e6-b178-2bc1f6aefc14"

    # Test checks
    test_check_interval: int = 30
    test_check_deadline_seconds: float = 55.0
    test_check_timeout_seconds: float = 60.0
    worker_connect_timeout_seconds: float = 3.0
    worker_service_name: str = "checker"
    surface_test_check_errors: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The test-check deadline sent to workers is kept a few seconds shorter than the
# gateway-side timeout so the worker gives up before the caller does.
