"""
Configuration Management for matchcore

Every tunable constant of the scoring layer (cluster count, iteration
budgets, Elo k-factor, fraud weights, matchmaking weights, input limits)
lives in a dataclass section with the documented default. Engines receive a
MatchcoreConfig at construction; nothing in the core reads files or the
environment.

Configuration sources for the outer shell (highest to lowest):
1. Environment variables (MATCHCORE_*)
2. Configuration file (YAML, TOML, JSON)
3. Default values
"""

import json
import logging
import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, get_args, get_type_hints

import yaml

from matchcore.core.constants import EventType
from matchcore.core.errors import InvalidInputError

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class ClusteringConfig:
    """Configuration for k-means player clustering."""

    k: int = 4
    # Iteration budget used by MatchmakingEngine.rebuild_clusters; bounds
    # how long the write lock is held
    rebuild_iterations: int = 25
    # Below this many profiles, clustering is skipped
    min_profiles: int = 4
    # Fixed seed for centroid initialization (None = fresh entropy)
    seed: int | None = None


@dataclass
class RatingConfig:
    """Configuration for Elo rating updates."""

    k_factor: float = 24.0


@dataclass
class FraudConfig:
    """Configuration for the heuristic fraud scorer."""

    # rapid_actions
    rapid_action_window_ms: float = 500.0
    rapid_action_min_count: int = 10  # signal fires when count exceeds this
    rapid_actions_weight: float = 0.25

    # reward_outliers
    reward_event_type: str = EventType.REWARD_CLAIM.value
    reward_z_threshold: float = 3.0
    reward_outliers_weight: float = 0.35

    # winrate_spike
    winrate_threshold: float = 0.95
    winrate_rating_ceiling: float = 2400.0
    winrate_spike_weight: float = 0.2

    # region_hopping
    region_event_type: str = EventType.REGION_CHANGE.value
    region_hopping_weight: float = 0.2

    # Final score: min(max_risk_score, round(sum(value * weight) * score_multiplier))
    score_multiplier: float = 20.0
    max_risk_score: int = 100

    # Verdict thresholds
    medium_risk_threshold: int = 30
    high_risk_threshold: int = 60


@dataclass
class MatchmakingConfig:
    """Configuration for candidate filtering and composite scoring."""

    default_tolerance: float = 200.0
    default_max_candidates: int = 20
    default_team_size: int = 1

    # Composite score weights
    distance_weight: float = 0.6
    rating_weight: float = 0.25
    latency_weight: float = 0.15
    cluster_bonus: float = 0.15

    # Latency score denominator floor (ms)
    latency_reference_ms: float = 200.0


@dataclass
class LimitsConfig:
    """Upper bounds on per-call input size."""

    max_events: int = 10_000
    max_candidates: int = 200


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class MatchcoreConfig:
    """Main configuration container."""

    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    rating: RatingConfig = field(default_factory=RatingConfig)
    fraud: FraudConfig = field(default_factory=FraudConfig)
    matchmaking: MatchmakingConfig = field(default_factory=MatchmakingConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


SECTIONS: tuple[str, ...] = ("clustering", "rating", "fraud", "matchmaking", "limits", "logging")


def validate_config(config: MatchcoreConfig) -> None:
    """
    Reject configurations the scoring code cannot work with.

    Raises:
        InvalidInputError: On the first invalid value found
    """
    if config.clustering.k < 1:
        raise InvalidInputError(f"clustering.k must be >= 1, got {config.clustering.k}")
    if config.clustering.rebuild_iterations < 0:
        raise InvalidInputError("clustering.rebuild_iterations must be >= 0")
    if config.clustering.seed is not None and config.clustering.seed < 0:
        raise InvalidInputError(f"clustering.seed must be >= 0, got {config.clustering.seed}")
    if config.rating.k_factor <= 0:
        raise InvalidInputError(f"rating.k_factor must be > 0, got {config.rating.k_factor}")
    if config.matchmaking.default_tolerance < 0:
        raise InvalidInputError("matchmaking.default_tolerance must be >= 0")
    if config.limits.max_events < 1 or config.limits.max_candidates < 1:
        raise InvalidInputError("limits must be >= 1")
    if config.fraud.medium_risk_threshold > config.fraud.high_risk_threshold:
        raise InvalidInputError("fraud.medium_risk_threshold must not exceed high_risk_threshold")
    if config.logging.level.upper() not in logging.getLevelNamesMapping():
        raise InvalidInputError(f"Unknown log level: {config.logging.level}")


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "matchcore.yaml")
    paths.append(Path.cwd() / "matchcore.toml")
    paths.append(Path.cwd() / "matchcore.json")

    # User home directory
    home = Path.home()
    paths.append(home / ".config" / "matchcore" / "config.yaml")
    paths.append(home / ".config" / "matchcore" / "config.toml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "matchcore" / "config.yaml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


ENV_MAPPINGS: dict[str, tuple[str, str]] = {
    "MATCHCORE_LOG_LEVEL": ("logging", "level"),
    "MATCHCORE_LOG_FILE": ("logging", "file"),
    "MATCHCORE_CLUSTER_K": ("clustering", "k"),
    "MATCHCORE_CLUSTER_SEED": ("clustering", "seed"),
    "MATCHCORE_CLUSTER_ITERATIONS": ("clustering", "rebuild_iterations"),
    "MATCHCORE_ELO_K_FACTOR": ("rating", "k_factor"),
    "MATCHCORE_DEFAULT_TOLERANCE": ("matchmaking", "default_tolerance"),
    "MATCHCORE_MAX_EVENTS": ("limits", "max_events"),
    "MATCHCORE_MAX_CANDIDATES": ("limits", "max_candidates"),
}


def _coerce_env_value(env_var: str, value: str, section: str, key: str) -> Any:
    """Convert an environment string to the type declared on the config field."""
    section_type = type(getattr(MatchcoreConfig(), section))
    declared = get_type_hints(section_type)[key]
    # Optional fields: use the non-None member of the union
    target = next((t for t in get_args(declared) if t is not type(None)), declared)

    try:
        if target is bool:
            if value.lower() not in ("true", "false"):
                raise ValueError(value)
            return value.lower() == "true"
        if target is int:
            return int(value)
        if target is float:
            return float(value)
    except ValueError:
        raise InvalidInputError(
            f"{env_var} must be {target.__name__}, got {value!r}"
        ) from None
    return value


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    for env_var, (section, key) in ENV_MAPPINGS.items():
        value = os.environ.get(env_var)
        if value is not None:
            if section not in config:
                config[section] = {}
            config[section][key] = _coerce_env_value(env_var, value, section, key)

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> MatchcoreConfig:
    """Convert a dictionary to MatchcoreConfig, ignoring unknown keys."""
    config = MatchcoreConfig()

    for section_name in SECTIONS:
        section_data = data.get(section_name)
        if not section_data:
            continue
        section = getattr(config, section_name)
        known = {f.name for f in fields(section)}
        for key, value in section_data.items():
            if key in known:
                setattr(section, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section_name}.{key}")

    if "config_version" in data:
        config.config_version = str(data["config_version"])

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> MatchcoreConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged, validated MatchcoreConfig
    """
    config_data: dict[str, Any] = {}

    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    config = dict_to_config(config_data)
    validate_config(config)
    return config


# ============================================================================
# Configuration Saving
# ============================================================================


def config_to_dict(config: MatchcoreConfig) -> dict[str, Any]:
    """Convert MatchcoreConfig to a dictionary."""
    return asdict(config)


def save_config(config: MatchcoreConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (.yaml, .yml or .json)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unsupported config format for saving: {suffix}")

    logger.info(f"Saved config to: {path}")


# ============================================================================
# Configuration Templates
# ============================================================================

DEFAULT_CONFIG_YAML = """# matchcore configuration

# k-means player clustering
clustering:
  k: 4
  rebuild_iterations: 25
  min_profiles: 4
  # seed: 42  # pin centroid initialization

# Elo rating updates
rating:
  k_factor: 24

# Heuristic fraud scoring
fraud:
  rapid_action_window_ms: 500
  rapid_action_min_count: 10
  rapid_actions_weight: 0.25
  reward_z_threshold: 3.0
  reward_outliers_weight: 0.35
  winrate_threshold: 0.95
  winrate_rating_ceiling: 2400
  winrate_spike_weight: 0.2
  region_hopping_weight: 0.2
  score_multiplier: 20
  max_risk_score: 100
  medium_risk_threshold: 30
  high_risk_threshold: 60

# Candidate scoring
matchmaking:
  default_tolerance: 200
  default_max_candidates: 20
  distance_weight: 0.6
  rating_weight: 0.25
  latency_weight: 0.15
  cluster_bonus: 0.15
  latency_reference_ms: 200

# Per-call input bounds
limits:
  max_events: 10000
  max_candidates: 200

logging:
  level: INFO
  # file: /path/to/matchcore.log
"""


def generate_default_config(path: Path) -> None:
    """Generate a default configuration file."""
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML)
    else:
        save_config(MatchcoreConfig(), path)

    logger.info(f"Generated default config at: {path}")
