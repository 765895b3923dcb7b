"""
Configuration management and loading.

Secrets come from environment variables (optionally loaded from a .env
file); business rules come from an optional YAML settings file.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from act_report.core.errors import ConfigurationError
from act_report.core.generator import ReportOptions
from act_report.core.period import PeriodPolicy
from act_report.core.usage import DEFAULT_FIXED_RATE, MalformedPolicy, RateSource
from act_report.sdk.statistics_client import DEFAULT_API_URL
from act_report.storage.writer import DEFAULT_OUTPUT_DIR

DEFAULT_CONFIG_FILE = "act-report.yaml"
DEFAULT_TEMPLATE = "template.docx"

TOKEN_ENV = "BEARER_TOKEN"
LAST_NAME_ENV = "LAST_NAME"


@dataclass(frozen=True)
class Settings:
    """Complete configuration of a report run."""
    bearer_token: Optional[str]
    last_name: str = ""
    api_url: str = DEFAULT_API_URL
    template: Path = Path(DEFAULT_TEMPLATE)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    rate_source: RateSource = RateSource.API
    fixed_rate: Decimal = DEFAULT_FIXED_RATE
    period_policy: PeriodPolicy = PeriodPolicy.PREVIOUS_MONTH
    zero_pad_kopecks: bool = False
    on_malformed: MalformedPolicy = MalformedPolicy.ABORT
    strip_settings: bool = True

    def validate_preconditions(self) -> None:
        """Fail fast before any work is done.

        Raises:
            ConfigurationError: If the token is absent or the template is missing
        """
        if not self.bearer_token:
            raise ConfigurationError(f"{TOKEN_ENV} is not defined in the environment variables")
        if not self.template.is_file():
            raise ConfigurationError(f"Template file {self.template} not found")

    def report_options(self) -> ReportOptions:
        """Business rules for the report generator."""
        return ReportOptions(
            rate_source=self.rate_source,
            fixed_rate=self.fixed_rate,
            period_policy=self.period_policy,
            zero_pad_kopecks=self.zero_pad_kopecks,
            on_malformed=self.on_malformed,
            last_name=self.last_name
        )


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[str] = None
) -> Settings:
    """Load settings from the environment and an optional YAML file.

    Args:
        path: YAML settings file. If None, DEFAULT_CONFIG_FILE is used when it exists
        environ: Environment to read secrets from (defaults to os.environ
            after loading .env)
        dotenv_path: Explicit .env file; the default search is used when None

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If the settings file is missing, invalid or has unknown keys
    """
    if environ is None:
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))
        environ = os.environ

    raw_config: Dict[str, Any] = {}
    if path is not None or Path(DEFAULT_CONFIG_FILE).is_file():
        raw_config = _read_yaml(path or DEFAULT_CONFIG_FILE)

    token = environ.get(TOKEN_ENV)
    return _parse_settings(
        raw_config,
        bearer_token=(token or "").strip() or None,
        last_name=environ.get(LAST_NAME_ENV, "")
    )


def _read_yaml(path: str) -> Dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Settings file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in settings file {path}: {e}")

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")
    return raw_config


def _parse_settings(raw_config: Dict[str, Any], bearer_token: Optional[str], last_name: str) -> Settings:
    """Validate the YAML mapping and build Settings.

    Strict validation: unknown keys and wrong types are errors, never
    silently ignored.
    """
    allowed_keys = {
        'api_url', 'template', 'output_dir', 'rate_source', 'fixed_rate',
        'period_policy', 'zero_pad_kopecks', 'on_malformed', 'strip_settings'
    }
    unknown_keys = set(raw_config.keys()) - allowed_keys
    if unknown_keys:
        raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown_keys)}")

    return Settings(
        bearer_token=bearer_token,
        last_name=last_name,
        api_url=_parse_str(raw_config, 'api_url', DEFAULT_API_URL),
        template=Path(_parse_str(raw_config, 'template', DEFAULT_TEMPLATE)),
        output_dir=Path(_parse_str(raw_config, 'output_dir', DEFAULT_OUTPUT_DIR)),
        rate_source=_parse_enum(raw_config, 'rate_source', RateSource, RateSource.API),
        fixed_rate=_parse_rate(raw_config.get('fixed_rate', DEFAULT_FIXED_RATE)),
        period_policy=_parse_enum(raw_config, 'period_policy', PeriodPolicy, PeriodPolicy.PREVIOUS_MONTH),
        zero_pad_kopecks=_parse_bool(raw_config, 'zero_pad_kopecks', False),
        on_malformed=_parse_enum(raw_config, 'on_malformed', MalformedPolicy, MalformedPolicy.ABORT),
        strip_settings=_parse_bool(raw_config, 'strip_settings', True)
    )


def _parse_str(data: Dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"'{key}' must be a non-empty string")
    return value


def _parse_bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be true or false")
    return value


def _parse_enum(data: Dict[str, Any], key: str, enum_cls, default):
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigurationError(f"'{key}' must be a string")

    try:
        return enum_cls(value.lower())
    except ValueError:
        valid_values = [member.value for member in enum_cls]
        raise ConfigurationError(f"'{key}' must be one of: {valid_values}")


def _parse_rate(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ConfigurationError(f"'fixed_rate' must be a number, got {value!r}")
    try:
        rate = Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(f"'fixed_rate' must be a number, got {value!r}")
    if not rate.is_finite() or rate < 0:
        raise ConfigurationError("'fixed_rate' must be >= 0")
    return rate
