# src/beacon/core/config.py
"""Configuration models for Beacon senders.

Pydantic models validate at construction and are frozen afterwards.
Loading these from files or the environment is the caller's concern;
``SenderSettings.model_validate(mapping)`` accepts any parsed dict.
"""

from pydantic import BaseModel, Field, HttpUrl, field_validator, model_validator

from beacon.contracts.telemetry import TelemetryKind


class RetrySettings(BaseModel):
    """Retry and backoff configuration for delivery."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_attempts: int = Field(default=5, gt=0, description="Total send attempts, including the first")
    initial_delay_seconds: float = Field(default=1.0, gt=0, description="Initial backoff delay")
    max_delay_seconds: float = Field(default=15.0, gt=0, description="Cap on any single backoff delay")
    exponential_base: float = Field(default=2.0, gt=1.0, description="Exponential backoff base")
    jitter_seconds: float = Field(default=1.0, ge=0, description="Upper bound of random jitter added per wait")
    max_elapsed_seconds: float = Field(default=120.0, gt=0, description="Total time budget for one batch's retries")

    @model_validator(mode="after")
    def _delay_cap_covers_initial(self) -> "RetrySettings":
        if self.max_delay_seconds < self.initial_delay_seconds:
            raise ValueError("max_delay_seconds must be >= initial_delay_seconds")
        return self


class EndpointSettings(BaseModel):
    """Ingest endpoint per telemetry kind."""

    model_config = {"frozen": True, "extra": "forbid"}

    metrics_url: HttpUrl = Field(description="Endpoint for metric batches")
    spans_url: HttpUrl = Field(description="Endpoint for span batches")
    events_url: HttpUrl = Field(description="Endpoint for event batches")

    def url_for(self, kind: TelemetryKind) -> str:
        urls = {
            TelemetryKind.METRICS: self.metrics_url,
            TelemetryKind.SPANS: self.spans_url,
            TelemetryKind.EVENTS: self.events_url,
        }
        return str(urls[kind])


class SenderSettings(BaseModel):
    """Top-level sender configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    endpoints: EndpointSettings = Field(description="Ingest endpoints")
    retry: RetrySettings = Field(default_factory=RetrySettings, description="Retry/backoff behaviour")
    timeout_seconds: float = Field(default=2.0, gt=0, description="HTTP timeout per request")
    gzip: bool = Field(default=False, description="Gzip request bodies")
    user_agent_product: str | None = Field(
        default=None,
        description="Optional product token appended to the User-Agent (e.g. 'my-app/1.2')",
    )
    api_key_header: str = Field(default="Api-Key", min_length=1, description="Header carrying the API key")

    @field_validator("user_agent_product")
    @classmethod
    def _product_token_has_no_whitespace_edges(cls, value: str | None) -> str | None:
        if value is not None and (not value or value != value.strip()):
            raise ValueError("user_agent_product must be non-empty without leading/trailing whitespace")
        return value
