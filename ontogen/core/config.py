"""Configuration management for ontogen."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from ontogen.core.exceptions import ConfigurationError


class OntogenConfig(BaseSettings):
    """
    Configuration for the VHDL entity generator.

    Can be loaded from:
    - Environment variables (prefix: ONTOGEN_)
    - YAML file
    - Direct initialization

    Example:
        >>> config = OntogenConfig(datatype_uid="VHDL::Types", recursive=True)
        >>> config = OntogenConfig.from_yaml("ontogen.yaml")
        >>> config = OntogenConfig()
    """

    model_config = SettingsConfigDict(
        env_prefix="ONTOGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    implementation_uid: str = Field(
        default="Software::Graph::Implementation::VHDL",
        description="Implementation class hosting all generated VHDL artifacts",
    )
    implementation_label: str = Field(
        default="VHDLImplementation",
        description="Label of the VHDL implementation class",
    )
    datatype_uid: str | None = Field(
        default=None,
        description="Datatype class hosting compatible types (None = all datatype classes)",
    )
    recursive: bool = Field(
        default=False,
        description="Also generate entities for every algorithm used as a part",
    )
    type_suffix: str = Field(
        default="_type",
        description="Suffix appended to interface class labels to form VHDL type names",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("implementation_uid")
    @classmethod
    def validate_implementation_uid(cls, v: str) -> str:
        """Implementation uid must not be empty."""
        if not v.strip():
            raise ValueError("implementation_uid must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_yaml(cls, path: Path | str) -> OntogenConfig:
        """
        Load configuration from YAML file.

        Environment variables take precedence over keys in the file.

        Args:
            path: Path to YAML configuration file

        Returns:
            OntogenConfig instance

        Raises:
            ConfigurationError: If the file is missing, unreadable, not valid
                YAML or not a mapping
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            msg = f"Cannot read config file {path}: {e}"
            raise ConfigurationError(msg) from e

        if not isinstance(yaml_data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")

        result_data = {}

        for key, value in yaml_data.items():
            env_key = f"ONTOGEN_{key.upper()}"
            if env_key in os.environ:
                continue
            result_data[key] = value

        return cls(**result_data)

    def to_yaml(self, path: Path | str) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to save YAML configuration
        """
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"OntogenConfig(implementation_uid={self.implementation_uid!r}, "
            f"datatype_uid={self.datatype_uid!r}, recursive={self.recursive})"
        )
