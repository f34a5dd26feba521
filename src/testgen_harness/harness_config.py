"""
Harness Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from testgen_harness.domain.constants import (
    DEFAULT_API_URL,
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_SOURCE_EXTENSIONS,
)


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


def _env_str_list(key: str, default: list[str]) -> list[str]:
    """Convert an environment variable to a comma-separated list of strings"""
    val = os.environ.get(key)
    if val is None:
        return list(default)
    return [x.strip() for x in val.split(",") if x.strip()]


@dataclass
class ServiceConfig:
    """Generation service configuration"""
    api_url: str = DEFAULT_API_URL


@dataclass
class RequestDefaults:
    """Run-wide values copied into every generation request"""
    additional_prompt: str = ""
    max_iterations: int = 0         # 0 = service default
    flakiness: bool = False
    function_under_test: str = ""
    expected_coverage: float = 0.0  # 0.0 = unset


@dataclass
class EnumerationConfig:
    """Candidate file enumeration configuration"""
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    source_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))


@dataclass
class OutputConfig:
    """Result table configuration"""
    output_path: str = DEFAULT_OUTPUT_PATH


@dataclass
class HarnessConfig:
    """Overall harness configuration"""
    service: ServiceConfig = field(default_factory=ServiceConfig)
    request: RequestDefaults = field(default_factory=RequestDefaults)
    enumeration: EnumerationConfig = field(default_factory=EnumerationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"harness_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "HarnessConfig":
        """Create from dictionary (handles presence/absence of harness_config key)"""
        config_data = data.get("harness_config", data)
        return cls(
            service=ServiceConfig(**config_data.get("service", {})),
            request=RequestDefaults(**config_data.get("request", {})),
            enumeration=EnumerationConfig(**config_data.get("enumeration", {})),
            output=OutputConfig(**config_data.get("output", {})),
        )


def load_config() -> HarnessConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        HarnessConfig
    """
    service = ServiceConfig(
        api_url=_env_str("TESTGEN_API_URL", DEFAULT_API_URL),
    )
    request = RequestDefaults(
        additional_prompt=_env_str("TESTGEN_ADDITIONAL_PROMPT", ""),
        max_iterations=_env_int("TESTGEN_MAX_ITERATIONS", 0),
        flakiness=_env_bool("TESTGEN_FLAKINESS", False),
        function_under_test=_env_str("TESTGEN_FUNCTION_UNDER_TEST", ""),
        expected_coverage=_env_float("TESTGEN_EXPECTED_COVERAGE", 0.0),
    )
    enumeration = EnumerationConfig(
        exclude_dirs=_env_str_list("TESTGEN_EXCLUDE_DIRS", DEFAULT_EXCLUDE_DIRS),
        source_extensions=_env_str_list("TESTGEN_SOURCE_EXTENSIONS", DEFAULT_SOURCE_EXTENSIONS),
    )
    output = OutputConfig(
        output_path=_env_str("TESTGEN_OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
    )
    return HarnessConfig(
        service=service,
        request=request,
        enumeration=enumeration,
        output=output,
    )
