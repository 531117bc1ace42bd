"""
Render Configuration

Immutable per-call configuration for the rendering pipeline, plus a loader for YAML
config files.

Examples:
    # Defaults: full mode, every feature on, lenient, cache enabled
    >>> config = RenderConfig()

    # Compact preview rendering without the cache
    >>> config = RenderConfig(mode=RenderMode.PREVIEW, cache=CacheSettings(enabled=False))

    # From a YAML file (or the EXAMTEX_RENDER_CONFIG environment variable)
    >>> config = load_render_config(Path("configs/render.yaml"))
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

# Capacity of the process-shared render cache
DEFAULT_CACHE_CAPACITY = 200


class RenderMode(str, Enum):
    """
    Which pipeline stages run, and with which numbering policy.

    FULL: markdown, numbered directives, math
    LIGHTWEIGHT: generic directive labels, math
    PREVIEW: LIGHTWEIGHT on truncated input
    """

    FULL = "full"
    LIGHTWEIGHT = "lightweight"
    PREVIEW = "preview"


class ErrorHandling(str, Enum):
    """Error-handling strictness. Only LENIENT is implemented; STRICT is reserved."""

    LENIENT = "lenient"
    STRICT = "strict"


@dataclass(frozen=True)
class RenderFeatures:
    """
    Feature flags.

    auto_numbering is reserved: FULL mode always numbers sub-questions when
    question_syntax is on, whatever this flag says.
    """

    markdown: bool = True
    question_syntax: bool = True
    auto_numbering: bool = True


@dataclass(frozen=True)
class CacheSettings:
    enabled: bool = True
    max_entries: int = DEFAULT_CACHE_CAPACITY

    def __post_init__(self):
        if self.max_entries < 1:
            raise ValueError(f"Cache max_entries must be at least 1, got {self.max_entries}")


@dataclass(frozen=True)
class RenderConfig:
    """
    Configuration supplied with every render call.

    Attributes:
        mode: Pipeline mode (default: FULL)
        features: Feature flags (default: all on)
        error_handling: Strictness (default: LENIENT)
        cache: Cache settings (default: enabled, DEFAULT_CACHE_CAPACITY entries)
    """

    mode: RenderMode = RenderMode.FULL
    features: RenderFeatures = field(default_factory=RenderFeatures)
    error_handling: ErrorHandling = ErrorHandling.LENIENT
    cache: CacheSettings = field(default_factory=CacheSettings)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RenderConfig":
        """
        Build a RenderConfig from a plain nested mapping.

        Accepts snake_case keys and the camelCase spellings used by front-end
        callers (questionSyntax, autoNumbering, errorHandling, maxEntries).
        Missing keys take their defaults.

        Raises:
            ValueError: If mode or error_handling names an unknown value

        Example:
            >>> RenderConfig.from_dict({"mode": "preview", "cache": {"maxEntries": 50}})
        """
        data = dict(data or {})
        features = dict(data.get("features") or {})
        cache = dict(data.get("cache") or {})

        # errorHandling historically lived under features
        error_handling = _pick(
            data, "error_handling", "errorHandling",
            default=_pick(features, "error_handling", "errorHandling", default="lenient"),
        )

        return cls(
            mode=RenderMode(str(data.get("mode", RenderMode.FULL.value)).lower()),
            features=RenderFeatures(
                markdown=bool(features.get("markdown", True)),
                question_syntax=bool(
                    _pick(features, "question_syntax", "questionSyntax", default=True)
                ),
                auto_numbering=bool(
                    _pick(features, "auto_numbering", "autoNumbering", default=True)
                ),
            ),
            error_handling=ErrorHandling(str(error_handling).lower()),
            cache=CacheSettings(
                enabled=bool(cache.get("enabled", True)),
                max_entries=int(
                    _pick(cache, "max_entries", "maxEntries", default=DEFAULT_CACHE_CAPACITY)
                ),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form, suitable for OmegaConf.create() or provenance logging."""
        return {
            "mode": self.mode.value,
            "features": {
                "markdown": self.features.markdown,
                "question_syntax": self.features.question_syntax,
                "auto_numbering": self.features.auto_numbering,
            },
            "error_handling": self.error_handling.value,
            "cache": {
                "enabled": self.cache.enabled,
                "max_entries": self.cache.max_entries,
            },
        }


def _pick(mapping: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present in mapping."""
    for key in keys:
        if key in mapping:
            return mapping[key]
    return default


def load_render_config(config_path: Path = None) -> RenderConfig:
    """
    Load a RenderConfig from a YAML file.

    Args:
        config_path: Path to the YAML config. Defaults to the EXAMTEX_RENDER_CONFIG
            environment variable; when that is unset too, defaults are returned.

    Returns:
        RenderConfig built from the file contents

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the file names an unknown mode or strictness
    """
    if config_path is None:
        env_path = os.getenv("EXAMTEX_RENDER_CONFIG")
        if not env_path:
            return RenderConfig()
        config_path = Path(env_path)

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Render config not found at {config_path}")

    config_dict = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    return RenderConfig.from_dict(config_dict)
