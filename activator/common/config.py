"""
Configuration Dataclasses

Type-safe configuration structures for the activator node.
Configuration is read from a YAML file at startup.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

from .exceptions import ConfigError

DEFAULT_CONFIG_PATHS = [
    "/etc/fan-activator/config.yaml",
    "config.yaml",
]


class SignalSourceType(str, Enum):
    """Signal strength sources"""
    SIMULATED = "simulated"
    STATIC = "static"


@dataclass
class ObserveSettings:
    """Remote temperature resource to observe"""
    address: str = "127.0.0.1"
    port: int = 5683
    path: str = "temperature/push"
    auto_subscribe: bool = True
    poll_interval_s: float = 5.0  # used when the peer sends no max-age
    request_timeout_s: float = 2.0
    max_retries: int = 4  # consecutive failures before a timeout is reported
    toggle_interval_s: float = 0.0  # 0 = never toggle automatically


@dataclass
class HistorySettings:
    """Rolling temperature history"""
    capacity: int = 4


@dataclass
class ControlSettings:
    """Control law constants"""
    default_threshold: int = 25
    weighting: str = "inverse"  # inverse, linear, unity
    max_intensity: int = 7  # 3-bit actuator encoding
    base_period_s: float = 1.0
    # Rate when mean <= threshold. Deltas below this rate tick slower than idle,
    # so lower it if small deviations should react faster than no deviation.
    idle_frequency_hz: float = 5.0
    max_frequency_hz: float = 20.0


@dataclass
class SignalSettings:
    """Link quality input"""
    source: SignalSourceType = SignalSourceType.SIMULATED
    calibration_offset: int = 55
    static_value: int = -45  # static reading, or the simulated walk's start
    floor: int = -90  # simulated walk bounds
    ceiling: int = -20
    seed: int | None = None


@dataclass
class CommandSettings:
    """Remote command (threshold) endpoint"""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 5684


@dataclass
class ActivatorConfig:
    """Complete node configuration"""
    node_id: str = "fan-activator"
    observe: ObserveSettings = field(default_factory=ObserveSettings)
    history: HistorySettings = field(default_factory=HistorySettings)
    control: ControlSettings = field(default_factory=ControlSettings)
    signal: SignalSettings = field(default_factory=SignalSettings)
    command: CommandSettings = field(default_factory=CommandSettings)

    @property
    def observe_url(self) -> str:
        return f"{self.observe.address}:{self.observe.port}/{self.observe.path}"


def load_activator_config(data: dict | None) -> ActivatorConfig:
    """Load ActivatorConfig from dictionary (e.g., from YAML file)"""
    data = data or {}

    observe_data = data.get("observe", {})
    observe = ObserveSettings(
        address=observe_data.get("address", "127.0.0.1"),
        port=observe_data.get("port", 5683),
        path=observe_data.get("path", "temperature/push").lstrip("/"),
        auto_subscribe=observe_data.get("auto_subscribe", True),
        poll_interval_s=observe_data.get("poll_interval_s", 5.0),
        request_timeout_s=observe_data.get("request_timeout_s", 2.0),
        max_retries=observe_data.get("max_retries", 4),
        toggle_interval_s=observe_data.get("toggle_interval_s", 0.0),
    )

    history_data = data.get("history", {})
    history = HistorySettings(capacity=history_data.get("capacity", 4))

    control_data = data.get("control", {})
    control = ControlSettings(
        default_threshold=control_data.get("default_threshold", 25),
        weighting=control_data.get("weighting", "inverse"),
        max_intensity=control_data.get("max_intensity", 7),
        base_period_s=control_data.get("base_period_s", 1.0),
        idle_frequency_hz=control_data.get("idle_frequency_hz", 5.0),
        max_frequency_hz=control_data.get("max_frequency_hz", 20.0),
    )

    signal_data = data.get("signal", {})
    try:
        source = SignalSourceType(signal_data.get("source", "simulated"))
    except ValueError:
        raise ConfigError(f"Unknown signal source: {signal_data.get('source')!r}")
    signal = SignalSettings(
        source=source,
        calibration_offset=signal_data.get("calibration_offset", 55),
        static_value=signal_data.get("static_value", -45),
        floor=signal_data.get("floor", -90),
        ceiling=signal_data.get("ceiling", -20),
        seed=signal_data.get("seed"),
    )

    command_data = data.get("command", {})
    command = CommandSettings(
        enabled=command_data.get("enabled", True),
        host=command_data.get("host", "127.0.0.1"),
        port=command_data.get("port", 5684),
    )

    return ActivatorConfig(
        node_id=data.get("node_id", "fan-activator"),
        observe=observe,
        history=history,
        control=control,
        signal=signal,
        command=command,
    )


def validate_config(config: ActivatorConfig) -> list[str]:
    """Check config values; returns a list of error messages (empty if valid)"""
    errors = []

    if not config.observe.address:
        errors.append("Missing observe.address")
    if not config.observe.path:
        errors.append("Missing observe.path")
    if config.observe.poll_interval_s <= 0:
        errors.append("observe.poll_interval_s must be positive")
    if config.observe.max_retries < 1:
        errors.append("observe.max_retries must be at least 1")
    if config.observe.toggle_interval_s < 0:
        errors.append("observe.toggle_interval_s must not be negative")

    if config.history.capacity < 1:
        errors.append("history.capacity must be at least 1")

    signal = config.signal
    if signal.source == SignalSourceType.SIMULATED:
        if signal.floor > signal.ceiling:
            errors.append("signal.floor must be <= signal.ceiling")
        elif not signal.floor <= signal.static_value <= signal.ceiling:
            errors.append(
                f"signal.static_value {signal.static_value} outside "
                f"[{signal.floor}, {signal.ceiling}] for the simulated source"
            )

    if not 0 < config.control.max_intensity <= 7:
        errors.append("control.max_intensity must be between 1 and 7")
    if config.control.base_period_s <= 0:
        errors.append("control.base_period_s must be positive")
    if config.control.idle_frequency_hz <= 0:
        errors.append("control.idle_frequency_hz must be positive")
    if config.control.max_frequency_hz < config.control.idle_frequency_hz:
        errors.append("control.max_frequency_hz must be >= control.idle_frequency_hz")

    for name, port in (("observe.port", config.observe.port), ("command.port", config.command.port)):
        if not 0 < port < 65536:
            errors.append(f"{name} out of range: {port}")

    return errors


def find_config_path() -> str | None:
    """Return the first existing default config path"""
    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            return path
    return None


def load_config_file(path: str | Path | None) -> ActivatorConfig:
    """
    Load and validate configuration from a YAML file.

    A missing path (None) yields the defaults.

    Raises:
        ConfigError: file unreadable, not YAML, or values invalid
    """
    data: dict = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot load {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")

    config = load_activator_config(data)
    errors = validate_config(config)
    if errors:
        raise ConfigError("; ".join(errors))
    return config
