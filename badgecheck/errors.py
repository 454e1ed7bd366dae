"""Exception hierarchy for checkbadges."""


class BadgeCheckError(Exception):
    """Base exception for checkbadges."""


class FilterError(BadgeCheckError):
    """A stream object could not be decoded; the object is skipped."""


class UnsupportedFilter(FilterError):
    """The declared filter is unknown or cannot be applied here."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unsupported stream filter: {name}")
        self.name = name


class MalformedFilterData(FilterError):
    """The payload does not conform to the declared filter."""


class UnreadablePdf(BadgeCheckError):
    """The PDF container structure cannot be read."""


class NoUsableData(BadgeCheckError):
    """A document yielded no person entries."""


class OcrUnavailable(BadgeCheckError):
    """A document needs OCR but no OCR backend could be used."""


class UnsupportedDocument(BadgeCheckError):
    """The file type cannot be ingested."""


class ConfigError(BadgeCheckError, ValueError):
    """Invalid configuration value."""


class ConfigFileError(BadgeCheckError):
    """Configuration file missing or not valid JSON."""
