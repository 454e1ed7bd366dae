"""Configuration and loading of the JSON config file."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from badgecheck import MatchThresholds
from badgecheck.classify import DEFAULT_INTEREST_KEYWORDS
from badgecheck.content import DEFAULT_KERNING_GAP
from badgecheck.errors import ConfigError, ConfigFileError
from badgecheck.extract import ExtractorVocabulary
from badgecheck.matching import DEFAULT_TYPO_CUTOFF

# Below this many characters of recovered text a PDF is sent to OCR
DEFAULT_OCR_MIN_CHARS = 10

_VOCABULARY_KEYS = (
    'honorifics',
    'banned_tokens',
    'skip_keywords',
    'first_name_markers',
    'last_name_markers',
    'interest_markers',
)


def _unit_interval(d: dict[str, Any], key: str, default: float) -> float:
    try:
        value = float(d.get(key, default))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number (got {d.get(key)!r})") from exc
    if not 0.0 <= value <= 1.0:
        raise ConfigError(f"{key} must be between 0 and 1 (got {value})")
    return value


def thresholds_from_dict(d: dict[str, Any]) -> MatchThresholds:
    """Build validated thresholds from ``{"first_name": .., "last_name": .., "interest": ..}``."""
    defaults = MatchThresholds()
    return MatchThresholds(
        first_name=_unit_interval(d, 'first_name', defaults.first_name),
        last_name=_unit_interval(d, 'last_name', defaults.last_name),
        interest=_unit_interval(d, 'interest', defaults.interest),
    )


def _string_list(d: dict[str, Any], key: str) -> list[str]:
    value = d[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return value


def _boolean(d: dict[str, Any], key: str, default: bool) -> bool:
    value = d.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false (got {value!r})")
    return value


@dataclass
class Config:
    """Settings of a reconciliation run."""

    thresholds: MatchThresholds = field(default_factory=MatchThresholds)
    strip_accents: bool = True
    typo_cutoff: float = DEFAULT_TYPO_CUTOFF
    kerning_gap: float = DEFAULT_KERNING_GAP
    ocr_min_chars: int = DEFAULT_OCR_MIN_CHARS
    vocabulary: ExtractorVocabulary = field(default_factory=ExtractorVocabulary)
    interest_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_INTEREST_KEYWORDS))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> 'Config':
        thresholds = d.get('thresholds', {})
        if not isinstance(thresholds, dict):
            raise ConfigError("thresholds must be an object")

        try:
            kerning_gap = float(d.get('kerning_gap', DEFAULT_KERNING_GAP))
            ocr_min_chars = int(d.get('ocr_min_chars', DEFAULT_OCR_MIN_CHARS))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid numeric setting: {exc}") from exc
        if kerning_gap <= 0:
            raise ConfigError(f"kerning_gap must be > 0 (got {kerning_gap})")
        if ocr_min_chars < 0:
            raise ConfigError(f"ocr_min_chars must be >= 0 (got {ocr_min_chars})")

        vocabulary_overrides = d.get('vocabulary', {})
        if not isinstance(vocabulary_overrides, dict):
            raise ConfigError("vocabulary must be an object")
        unknown = set(vocabulary_overrides) - set(_VOCABULARY_KEYS)
        if unknown:
            raise ConfigError(f"unknown vocabulary keys: {', '.join(sorted(unknown))}")
        vocabulary = ExtractorVocabulary(**{
            key: _string_list(vocabulary_overrides, key) for key in vocabulary_overrides
        })

        interest_keywords = (
            _string_list(d, 'interest_keywords') if 'interest_keywords' in d
            else list(DEFAULT_INTEREST_KEYWORDS)
        )

        return cls(
            thresholds=thresholds_from_dict(thresholds),
            strip_accents=_boolean(d, 'strip_accents', True),
            typo_cutoff=_unit_interval(d, 'typo_cutoff', DEFAULT_TYPO_CUTOFF),
            kerning_gap=kerning_gap,
            ocr_min_chars=ocr_min_chars,
            vocabulary=vocabulary,
            interest_keywords=interest_keywords,
        )

    @classmethod
    def load(cls, path: str | Path) -> 'Config':
        """Load the configuration from a JSON file.

        Raises:
            ConfigFileError: If the file is missing or not a JSON object.
            ConfigError: If a value is invalid.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Configuration file not found: {path}")

        try:
            with open(path, encoding='utf-8') as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Cannot read {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Invalid configuration file: {path} must contain a JSON object")

        return cls.from_dict(d)
