"""
Configuration loader for snapshot diffing.

The ignore list and multi-value separators are carried in an explicit
DiffConfig that is threaded into every extraction call.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

try:
    import yaml
except ImportError:
    yaml = None

from ..core.exceptions import ConfigError
from ..core.caseless import fold

logger = logging.getLogger(__name__)


# Multi-value separators, tried as alternatives in one split
DEFAULT_SEPARATORS: Tuple[str, ...] = (";", "|", "\n")


# Volatile/noisy directory attributes that change without a meaningful edit
DEFAULT_IGNORED_ATTRIBUTES: Tuple[str, ...] = (
    "uSNChanged",
    "uSNCreated",
    "whenChanged",
    "whenCreated",
    "modifyTimestamp",
    "createTimestamp",
    "lastLogon",
    "lastLogonTimestamp",
    "lastLogoff",
    "pwdLastSet",
    "badPwdCount",
    "badPasswordTime",
    "lockoutTime",
    "dSCorePropagationData",
    "msDS-ReplAttributeMetaData",
    "objectGUID",
    "objectSid",
    "msDS-KeyVersionNumber",
)


def build_separator_pattern(separators: Iterable[str]) -> "re.Pattern":
    """
    Compile the separators into one alternation.

    Longer separators are tried first so that e.g. "||" wins over "|".

    Args:
        separators: Separator strings (not regular expressions)

    Returns:
        Compiled pattern suitable for re.split
    """
    ordered = sorted(set(separators), key=lambda s: (-len(s), s))
    return re.compile("|".join(re.escape(s) for s in ordered))


class ParseErrorPolicy(str, Enum):
    """What to do with a payload that is not valid JSON."""
    SKIP = "skip"
    FAIL = "fail"


class DuplicateKeyPolicy(str, Enum):
    """How to resolve two records sharing a key within one snapshot."""
    LAST_WINS = "last_wins"
    FIRST_WINS = "first_wins"
    FAIL = "fail"


@dataclass
class DiffConfig:
    """
    Settings that control extraction and store building.

    Attributes:
        ignored_attributes: Attribute names never collected (case-insensitive)
        separators: Multi-value separators, used as alternatives in one split
        workers: Number of extraction threads per snapshot (1 = sequential)
        on_parse_error: Policy for malformed payloads
        on_duplicate_key: Policy for repeated keys within a snapshot
        log_level: Logging level name for the CLI
        structured_logs: Emit JSON log lines instead of human-readable ones
    """
    ignored_attributes: Tuple[str, ...] = DEFAULT_IGNORED_ATTRIBUTES
    separators: Tuple[str, ...] = DEFAULT_SEPARATORS
    workers: int = 1
    on_parse_error: ParseErrorPolicy = ParseErrorPolicy.SKIP
    on_duplicate_key: DuplicateKeyPolicy = DuplicateKeyPolicy.LAST_WINS
    log_level: str = "INFO"
    structured_logs: bool = False
    _ignored_folded: FrozenSet[str] = field(init=False, repr=False, compare=False)
    _separator_pattern: "re.Pattern" = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.ignored_attributes = _as_tuple(self.ignored_attributes, "ignored_attributes")
        self.separators = _as_tuple(self.separators, "separators")
        self.on_parse_error = _coerce_enum(ParseErrorPolicy, self.on_parse_error, "on_parse_error")
        self.on_duplicate_key = _coerce_enum(DuplicateKeyPolicy, self.on_duplicate_key, "on_duplicate_key")

        if not isinstance(self.workers, int) or isinstance(self.workers, bool) or self.workers < 1:
            raise ConfigError(f"workers must be a positive integer, got {self.workers!r}")
        if not self.separators or any(not isinstance(s, str) or not s for s in self.separators):
            raise ConfigError("separators must be a non-empty list of non-empty strings")
        if any(not isinstance(a, str) for a in self.ignored_attributes):
            raise ConfigError("ignored attribute names must be strings")

        self._ignored_folded = frozenset(fold(a) for a in self.ignored_attributes)
        self._separator_pattern = build_separator_pattern(self.separators)

    def is_ignored(self, attribute: str) -> bool:
        """Case-insensitive membership test against the ignore list."""
        return fold(attribute) in self._ignored_folded

    @property
    def separator_pattern(self) -> "re.Pattern":
        """Compiled alternation of the configured separators."""
        return self._separator_pattern

    def with_extra_ignored(self, names: Iterable[str]) -> "DiffConfig":
        """Return a copy whose ignore list also contains ``names``."""
        merged = list(self.ignored_attributes)
        seen = set(self._ignored_folded)
        for name in names:
            if fold(name) not in seen:
                merged.append(name)
                seen.add(fold(name))
        return DiffConfig(
            ignored_attributes=tuple(merged),
            separators=self.separators,
            workers=self.workers,
            on_parse_error=self.on_parse_error,
            on_duplicate_key=self.on_duplicate_key,
            log_level=self.log_level,
            structured_logs=self.structured_logs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ignore_attributes": list(self.ignored_attributes),
            "separators": list(self.separators),
            "workers": self.workers,
            "on_parse_error": self.on_parse_error.value,
            "on_duplicate_key": self.on_duplicate_key.value,
            "logging": {
                "level": self.log_level,
                "structured": self.structured_logs,
            },
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DiffConfig":
        """Create from a parsed YAML mapping."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping")

        ignored = _list_setting(data, "ignore_attributes", DEFAULT_IGNORED_ATTRIBUTES)
        ignored.extend(_list_setting(data, "extra_ignore_attributes", ()))
        separators = _list_setting(data, "separators", DEFAULT_SEPARATORS, allow_null=False)

        logging_cfg = data.get("logging") or {}
        if not isinstance(logging_cfg, dict):
            raise ConfigError(f"logging must be a mapping, got {logging_cfg!r}")

        return cls(
            ignored_attributes=tuple(ignored),
            separators=tuple(separators),
            workers=data.get("workers", 1),
            on_parse_error=data.get("on_parse_error", ParseErrorPolicy.SKIP),
            on_duplicate_key=data.get("on_duplicate_key", DuplicateKeyPolicy.LAST_WINS),
            log_level=str(logging_cfg.get("level", "INFO")).upper(),
            structured_logs=bool(logging_cfg.get("structured", False)),
        )


def _as_tuple(value: Any, name: str) -> Tuple[Any, ...]:
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"{name} must be a list, got {value!r}")
    return tuple(value)


def _list_setting(
    data: Dict[str, Any],
    key: str,
    default: Iterable[str],
    allow_null: bool = True,
) -> list:
    """Read a list-valued key; a bare string is rejected rather than split into characters."""
    value = data.get(key)
    if key not in data or (value is None and allow_null):
        return list(default)
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"{key} must be a list, got {value!r}")
    return list(value)


def _coerce_enum(enum_cls, value, name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{name} must be one of: {choices} (got {value!r})")


def load_config(config_path: Optional[Path] = None) -> DiffConfig:
    """
    Load a DiffConfig from YAML, then apply environment overrides.

    Args:
        config_path: Path to YAML config file (optional; defaults are used if omitted)

    Returns:
        DiffConfig instance
    """
    data: Dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if yaml is None:
            raise ImportError(
                "pyyaml is required for config loading. "
                "Install with: pip install pyyaml"
            )
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        logger.info(f"Loading config from: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")

    _apply_env_overrides(data)
    return DiffConfig.from_dict(data)


def _apply_env_overrides(data: Dict[str, Any]) -> None:
    """Apply environment variable overrides to loaded config."""
    workers = os.environ.get("SNAPDIFF_WORKERS")
    if workers:
        try:
            data["workers"] = int(workers)
        except ValueError:
            raise ConfigError(f"SNAPDIFF_WORKERS must be an integer, got {workers!r}")

    on_parse_error = os.environ.get("SNAPDIFF_ON_PARSE_ERROR")
    if on_parse_error:
        data["on_parse_error"] = on_parse_error

    log_level = os.environ.get("SNAPDIFF_LOG_LEVEL")
    if log_level:
        if data.get("logging") is None:
            data["logging"] = {}
        # a non-mapping logging section is reported by DiffConfig.from_dict
        if isinstance(data["logging"], dict):
            data["logging"]["level"] = log_level
