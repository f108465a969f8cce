"""
Configuration system with validation and environment awareness.
Based on Pydantic Settings for robust configuration management.

Only physical parameters of the formulas live here. The coefficient tables
in ``vinecalc.core.constants`` are not configurable.
"""
from pathlib import Path
import yaml
from pydantic import Field, ValidationError as PydanticValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal, Union

from vinecalc.core.exceptions import ConfigurationError, ErrorContext


class RadiationConfig(BaseSettings):
    """Parameters of the radiation terms in the reference ET formula"""

    albedo: float = Field(0.23, ge=0, le=1, description="Reference crop albedo")
    angstrom_a: float = Field(0.25, gt=0, lt=1, description="Ångström-Prescott intercept")
    angstrom_b: float = Field(0.50, gt=0, lt=1, description="Ångström-Prescott slope")
    lux_per_w_m2: float = Field(
        126.7, gt=0,
        description="Luminous efficacy of daylight used to convert lux to W/m²"
    )
    default_elevation_m: float = Field(
        0.0, description="Elevation assumed when the location has none"
    )

    @model_validator(mode="after")
    def validate_angstrom(self):
        """Clear-sky transmissivity a+b cannot exceed one"""
        if self.angstrom_a + self.angstrom_b > 1.0:
            raise ValueError("angstrom_a + angstrom_b must be <= 1")
        return self


class CanopyConfig(BaseSettings):
    """Parameters of the canopy light model"""

    extinction_coefficient: float = Field(
        0.6, gt=0, le=2,
        description="Beer-Lambert extinction coefficient for vine canopies"
    )


class LoggingConfig(BaseSettings):
    """Logging options used by the command-line runner"""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class EngineConfig(BaseSettings):
    """Main configuration for the calculation engines"""

    project_name: str = "vinecalc"

    radiation: RadiationConfig = Field(default_factory=RadiationConfig)
    canopy: CanopyConfig = Field(default_factory=CanopyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="VINECALC_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "EngineConfig":
        """Load configuration from YAML file"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise ConfigurationError(
                f"Config file not found: {yaml_path}",
                ErrorContext(component="config", operation="from_yaml"),
            )

        with open(yaml_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        try:
            return cls(**yaml_config)
        except PydanticValidationError as exc:
            raise ConfigurationError(
                f"Invalid configuration in {yaml_path}: {exc.error_count()} error(s)",
                ErrorContext(component="config", operation="from_yaml",
                             details={"errors": exc.errors()}),
            ) from exc

    def to_yaml(self, yaml_path: Union[str, Path]):
        """Save configuration to YAML file"""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


# Global configuration instance
_config: Optional[EngineConfig] = None


def get_config(config_path: Optional[Path] = None) -> EngineConfig:
    """Get or create configuration instance (singleton pattern)"""
    global _config

    if _config is None:
        if config_path and Path(config_path).exists():
            _config = EngineConfig.from_yaml(config_path)
        else:
            # Try to load from environment
            _config = EngineConfig()

    return _config


def set_config(config: Optional[EngineConfig]):
    """Set configuration (useful for testing)"""
    global _config
    _config = config
