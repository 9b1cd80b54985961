"""Configuration loading and validation for the finance reporter."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from finance_reporter.utils.logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


@dataclass
class ReportConfig:
    """Configuration for report content.

    Money is always shown with two decimal places; a settings file asking
    for anything else is rejected.

    Attributes:
        title: Document title.
        subtitle: Line shown under the title.
        currency_symbol: Symbol placed before every amount.
        date_format: strftime format for dates in the document.
        week_start: Default week start for the weekly preset ("sun" or "mon").
    """

    title: str = "Dashboard Report"
    subtitle: str = "A summary of your financial activity."
    currency_symbol: str = "$"
    date_format: str = "%Y-%m-%d"
    week_start: str = "mon"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ReportConfig":
        """Create from dictionary."""
        week_start = str(data.get("week_start", "mon"))
        if week_start not in ("sun", "mon"):
            raise ConfigError(f"'week_start' must be 'sun' or 'mon', got {week_start!r}")
        if str(data.get("decimal_places", 2)) != "2":
            raise ConfigError(f"'decimal_places' is fixed at 2, got {data['decimal_places']!r}")

        return cls(
            title=str(data.get("title", "Dashboard Report")),
            subtitle=str(data.get("subtitle", "A summary of your financial activity.")),
            currency_symbol=str(data.get("currency_symbol", "$")),
            date_format=str(data.get("date_format", "%Y-%m-%d")),
            week_start=week_start,
        )


@dataclass
class PageConfig:
    """Page geometry in millimetres (A4 by default)."""

    width_mm: float = 210.0
    height_mm: float = 297.0
    margin_mm: float = 15.0

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "PageConfig":
        """Create from dictionary."""
        page = cls(
            width_mm=float(data.get("width_mm", 210.0)),  # type: ignore[arg-type]
            height_mm=float(data.get("height_mm", 297.0)),  # type: ignore[arg-type]
            margin_mm=float(data.get("margin_mm", 15.0)),  # type: ignore[arg-type]
        )
        if page.margin_mm * 2 >= min(page.width_mm, page.height_mm):
            raise ConfigError("Page margins leave no printable area")
        return page


@dataclass
class FontConfig:
    """TrueType fonts used for all document text.

    When unset, the built-in Helvetica faces are used. Set both paths to a
    font with the needed glyphs (e.g. Noto Sans Bengali for "৳") to render
    non-Latin text.

    Attributes:
        regular: Path to the regular TTF file.
        bold: Path to the bold TTF file (defaults to regular).
    """

    regular: Optional[str] = None
    bold: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "FontConfig":
        """Create from dictionary."""
        regular = data.get("regular")
        bold = data.get("bold")
        return cls(
            regular=str(regular) if regular else None,
            bold=str(bold) if bold else None,
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "finance_reporter.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "finance_reporter.log")),
        )


@dataclass
class Config:
    """Main configuration container."""

    report: ReportConfig = field(default_factory=ReportConfig)
    page: PageConfig = field(default_factory=PageConfig)
    fonts: FontConfig = field(default_factory=FontConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load configuration from settings.yaml.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object (defaults when the file is missing).

    Raises:
        ConfigError: If the file is present but malformed.
    """
    if config_dir is None:
        config_dir = Path("config")
    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    config = Config()

    if not settings_path.exists():
        logger.warning(f"Settings file not found: {settings_path}, using defaults")
        return config

    data = load_yaml_file(settings_path)
    config.report = ReportConfig.from_dict(_section(data, "report"))
    config.page = PageConfig.from_dict(_section(data, "page"))
    config.fonts = FontConfig.from_dict(_section(data, "fonts"))
    config.logging = LoggingConfig.from_dict(_section(data, "logging"))
    logger.info(f"Loaded settings from {settings_path}")

    return config
