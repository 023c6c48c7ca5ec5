"""
ssri Configuration Management

Process-wide defaults for hashing, parsing and logging.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .exceptions import ConfigurationError

DEFAULT_ALGORITHMS = ("sha512",)


class HashBackend(Enum):
    """Hash primitive providers."""
    HASHLIB = "hashlib"
    CRYPTOGRAPHY = "cryptography"


@dataclass
class HashingConfig:
    """Digest generation configuration."""
    default_algorithms: List[str] = field(default_factory=lambda: list(DEFAULT_ALGORITHMS))
    backend: HashBackend = HashBackend.HASHLIB
    chunk_size: int = 65536


@dataclass
class ParsingConfig:
    """Integrity string parsing configuration."""
    strict: bool = False
    separator: str = " "


@dataclass
class Config:
    """
    Main configuration class for ssri.

    Library calls take explicit keyword arguments; this feeds the CLI.
    """
    hashing: HashingConfig = field(default_factory=HashingConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)

    # Operational settings
    log_level: str = "INFO"
    json_logs: bool = False

    @classmethod
    def from_file(cls, config_path: str) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to configuration YAML file

        Returns:
            Populated Config object

        Raises:
            ConfigurationError: If the loaded values fail validation
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        config = cls.from_dict(data)
        errors = config.validate()
        if errors:
            raise ConfigurationError(f"Invalid configuration in {config_path}", errors=errors)
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """
        Create configuration from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Populated Config object
        """
        config = cls()

        if "hashing" in data:
            hashing_data = data["hashing"].copy()
            if "backend" in hashing_data:
                hashing_data["backend"] = HashBackend(hashing_data["backend"])
            if "default_algorithms" in hashing_data:
                hashing_data["default_algorithms"] = list(hashing_data["default_algorithms"])
            config.hashing = HashingConfig(**hashing_data)
        if "parsing" in data:
            config.parsing = ParsingConfig(**data["parsing"])

        if "log_level" in data:
            config.log_level = data["log_level"]
        if "json_logs" in data:
            config.json_logs = data["json_logs"]

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "hashing": {
                "default_algorithms": list(self.hashing.default_algorithms),
                "backend": self.hashing.backend.value,
                "chunk_size": self.hashing.chunk_size,
            },
            "parsing": {
                "strict": self.parsing.strict,
                "separator": self.parsing.separator,
            },
            "log_level": self.log_level,
            "json_logs": self.json_logs,
        }

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.hashing.default_algorithms:
            errors.append("At least one default algorithm is required")
        for algorithm in self.hashing.default_algorithms:
            if not algorithm or "-" in algorithm:
                errors.append(f"Invalid algorithm name: {algorithm!r}")

        if self.hashing.chunk_size <= 0:
            errors.append("Chunk size must be positive")

        if not self.parsing.separator:
            errors.append("Separator must not be empty")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown log level: {self.log_level}")

        return errors
