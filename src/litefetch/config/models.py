"""Engine configuration data models."""

from dataclasses import asdict, dataclass, field

from litefetch.logging import LogConfig
from litefetch.types import LogFormat, LogLevel


@dataclass
class HttpConfig:
    """HTTP client pool configuration.

    TLS verification is off by default because plugin endpoints are
    user-supplied and frequently self-signed. Turn ``verify_tls`` on when
    every configured endpoint presents a valid certificate.
    """

    timeout_seconds: float = 10.0
    user_agent: str = "LiteMonitor/1.0"
    verify_tls: bool = False
    follow_redirects: bool = True


@dataclass
class CacheConfig:
    """Step response cache configuration."""

    max_entries: int = 100
    evict_fraction: float = 0.2
    max_body_bytes: int = 500 * 1024


@dataclass
class ExecutionConfig:
    """Instance execution configuration."""

    target_stagger_ms: int = 50


@dataclass
class LoggingComponentsConfig:
    """Logging components configuration."""

    engine: bool = True
    instance: bool = True
    step: bool = True
    http: bool = True
    cache: bool = True


@dataclass
class LoggingOptionsConfig:
    """Logging options configuration."""

    show_context: bool = True
    truncate_at: int = 200


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    components: LoggingComponentsConfig = field(default_factory=LoggingComponentsConfig)
    options: LoggingOptionsConfig = field(default_factory=LoggingOptionsConfig)

    def to_log_config(self) -> LogConfig:
        """Build the runtime logger configuration."""
        return LogConfig(
            level=self.level,
            format=self.format,
            show_context=self.options.show_context,
            truncate_at=self.options.truncate_at,
            components=asdict(self.components),
        )


@dataclass
class TelemetryOTLPConfig:
    """Telemetry OTLP exporter configuration.

    Attributes:
        enabled: Whether OTLP export is enabled
        endpoint: OTLP collector endpoint (e.g., http://otel-collector:4317)
        insecure: Whether to use insecure connection (no TLS)
        headers: Additional headers for authentication
    """

    enabled: bool = False
    endpoint: str = "http://localhost:4317"
    insecure: bool = True
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class TelemetryConfig:
    """Telemetry configuration."""

    enabled: bool = True
    service_name: str = "litefetch"
    service_version: str = "0.1.0"
    prometheus_enabled: bool = True
    tracing_enabled: bool = False
    otlp: TelemetryOTLPConfig = field(default_factory=TelemetryOTLPConfig)


@dataclass
class EngineConfig:
    """Root configuration object."""

    http: HttpConfig = field(default_factory=HttpConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
