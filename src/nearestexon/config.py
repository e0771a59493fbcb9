"""Configuration management for NearestExon.

Configuration is an explicit, immutable object handed to each annotator.
It can come from:
- Default values
- A TOML configuration file
- ``key=value`` parameter strings (e.g. ``limit=3,max_range=50000``)

Example:
    >>> from nearestexon.config import NearestExonConfig
    >>> config = NearestExonConfig.from_params(["limit=3", "max_range=50000"])
    >>> config.max_range
    50000
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Iterable

import attrs

logger = logging.getLogger(__name__)

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_LIMIT = 1  # Exons returned by the outward search
DEFAULT_RANGE = 1000  # Initial search range (bp)
DEFAULT_MAX_RANGE = 10000  # Maximum search range (bp)

DEFAULT_SEPARATOR = "|"
VCF_SEPARATOR = "+"

OUTPUT_FORMATS = ("tab", "vcf")

# Keys accepted from parameter strings and config files
INTEGER_KEYS = ("limit", "range", "max_range")


class ConfigurationError(ValueError):
    """Raised when a configuration value is missing, malformed or invalid."""

    pass


# =============================================================================
# Helpers
# =============================================================================


def separator_for_output_format(output_format: str | None) -> str:
    """Get the field separator used for an output format.

    Args:
        output_format: Output format name ("tab" or "vcf"). None means "tab".

    Returns:
        "+" for VCF output, "|" otherwise.

    Raises:
        ConfigurationError: If the output format is unknown.
    """
    if output_format is None:
        return DEFAULT_SEPARATOR
    if output_format not in OUTPUT_FORMATS:
        raise ConfigurationError(
            f"Unknown output format: '{output_format}'. "
            f"Expected one of: {', '.join(OUTPUT_FORMATS)}"
        )
    return VCF_SEPARATOR if output_format == "vcf" else DEFAULT_SEPARATOR


def _parse_int(key: str, value: Any) -> int:
    """Coerce a configuration value to a non-negative integer."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Value for '{key}' must be an integer, got {value!r}")
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(
            f"Value for '{key}' must be an integer, got {value!r}"
        ) from None
    if number < 0:
        raise ConfigurationError(f"Value for '{key}' must be >= 0, got {number}")
    return number


def _validate_separator(instance: Any, attribute: attrs.Attribute, value: str) -> None:
    if not value:
        raise ConfigurationError("Separator must be a non-empty string")
    if value == ",":
        raise ConfigurationError("Separator ',' is reserved for joining results")


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.frozen
class NearestExonConfig:
    """Configuration for nearest exon boundary queries.

    Attributes:
        limit: Maximum number of exons returned by the outward search.
        range: Initial outward search range in base pairs.
        max_range: Maximum search range; also the initial minimum distance.
        separator: Field separator for serialized results.
    """

    limit: int = DEFAULT_LIMIT
    range: int = DEFAULT_RANGE
    max_range: int = DEFAULT_MAX_RANGE
    separator: str = attrs.field(default=DEFAULT_SEPARATOR, validator=_validate_separator)

    @classmethod
    def from_params(
        cls,
        params: Iterable[str],
        output_format: str | None = None,
        base: NearestExonConfig | None = None,
    ) -> NearestExonConfig:
        """Build a configuration from ``key=value`` parameter strings.

        All parameters are validated before the configuration is built, so
        an error never leaves a partially applied configuration behind.

        Args:
            params: Parameter strings such as "limit=3".
            output_format: Output format used to pick the separator.
            base: Configuration providing values for keys not given.

        Returns:
            New configuration object.

        Raises:
            ConfigurationError: If a parameter cannot be parsed.
        """
        base = base or cls()
        values: dict[str, Any] = {}

        for param in params:
            key, sep, value = param.partition("=")
            key = key.strip()
            if not sep or not key or not value.strip():
                raise ConfigurationError(f"Failed to parse parameter {param}")
            if key in INTEGER_KEYS:
                values[key] = _parse_int(key, value)
            else:
                logger.warning(f"Ignoring unknown parameter: {key}")

        if output_format is not None:
            values["separator"] = separator_for_output_format(output_format)

        return attrs.evolve(base, **values)

    @classmethod
    def load(cls, path: Path | str | None = None) -> NearestExonConfig:
        """Load configuration from a TOML file.

        Values are read from a ``[nearestexon]`` table when present,
        otherwise from the top level of the document.

        Args:
            path: Path to the TOML file. If None, returns defaults.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If the configuration file doesn't exist.
            ConfigurationError: If the file or a value is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                document = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e

        table = document.get("nearestexon", document)
        values: dict[str, Any] = {}
        for key in INTEGER_KEYS:
            if key in table:
                values[key] = _parse_int(key, table[key])
        if "separator" in table:
            values["separator"] = str(table["separator"])
        elif "output_format" in table:
            values["separator"] = separator_for_output_format(table["output_format"])

        logger.debug(f"Loaded configuration from {path}: {values}")
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)
