#!/usr/bin/env python3
"""
genorec Configuration Parser

Reads codec settings from a YAML file. All keys are optional:

    reader:
      strict: true            # raise on the first malformed line
      skip_blank_lines: true  # ignore empty lines between records
      compact_cigars: false   # merge adjacent equal CIGAR ops after parsing
    interval:
      expand_policy: saturate # or "error"

Usage:
    # Get single value
    python -m genorec.config_parser config.yaml --get reader.strict

    # Validate configuration
    python -m genorec.config_parser config.yaml --validate

    # As Python module
    from genorec.config_parser import load_config, CodecSettings
    settings = CodecSettings.from_config(load_config("config.yaml"))
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .intervals import EXPAND_POLICIES

logger = logging.getLogger(__name__)

BOOLEAN_KEYS = (
    "reader.strict",
    "reader.skip_blank_lines",
    "reader.compact_cigars",
)


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}

    return config


def get_nested(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested value from config using dot notation.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., "reader.strict")
        default: Default value if key not found

    Returns:
        Value at the specified path, or default if not found

    Examples:
        >>> config = {"reader": {"strict": False}}
        >>> get_nested(config, "reader.strict")
        False
        >>> get_nested(config, "reader.missing", "default")
        'default'
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []

    if not isinstance(config, dict):
        return False, ["Configuration root must be a mapping"]

    for key_path in BOOLEAN_KEYS:
        value = get_nested(config, key_path)
        if value is not None and not isinstance(value, bool):
            errors.append(f"{key_path} must be true or false, got {value!r}")

    policy = get_nested(config, "interval.expand_policy")
    if policy is not None and policy not in EXPAND_POLICIES:
        errors.append(
            f"interval.expand_policy must be one of {', '.join(EXPAND_POLICIES)}, got {policy!r}"
        )

    return len(errors) == 0, errors


@dataclass(frozen=True)
class CodecSettings:
    """Options that control how record files are read."""
    strict: bool = True
    skip_blank_lines: bool = True
    compact_cigars: bool = False
    expand_policy: str = "saturate"

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "CodecSettings":
        """
        Build settings from a loaded config, keeping defaults for absent keys.

        Raises:
            ValueError: If the configuration does not validate
        """
        config = config or {}
        is_valid, errors = validate_config(config)
        if not is_valid:
            raise ValueError("Invalid configuration: " + "; ".join(errors))

        defaults = cls()
        return cls(
            strict=get_nested(config, "reader.strict", defaults.strict),
            skip_blank_lines=get_nested(config, "reader.skip_blank_lines", defaults.skip_blank_lines),
            compact_cigars=get_nested(config, "reader.compact_cigars", defaults.compact_cigars),
            expand_policy=get_nested(config, "interval.expand_policy", defaults.expand_policy),
        )


def print_config_summary(settings: CodecSettings) -> None:
    """Print a human-readable settings summary."""
    print("=" * 60)
    print("genorec Codec Settings")
    print("=" * 60)
    for key, value in asdict(settings).items():
        print(f"  {key}: {value}")
    print("=" * 60)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="genorec Configuration Parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "config",
        help="Path to YAML configuration file"
    )

    parser.add_argument(
        "--get",
        metavar="KEY",
        help="Get single value using dot notation (e.g., reader.strict)"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and report errors"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON (for --get with complex values)"
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML: {e}")
        return 1

    if args.get:
        value = get_nested(config, args.get)
        if value is None:
            logger.error(f"Key not found: {args.get}")
            return 1
        print(json.dumps(value) if args.json else value)
        return 0

    is_valid, errors = validate_config(config)
    if args.validate:
        if is_valid:
            print("Configuration is valid!")
            return 0
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    if not is_valid:
        for error in errors:
            logger.error(error)
        return 1

    print_config_summary(CodecSettings.from_config(config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
