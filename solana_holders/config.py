"""Configuration module for Solana Holders.

Settings are read from the environment (optionally via a ``.env`` file) once,
at process start, and passed explicitly to every client and service.
"""

# Standard library imports
import os
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from solana_holders.constants import DEFAULT_LOCK_LABEL_KEYWORDS, TOKEN_2022_PROGRAM_ID
from solana_holders.utils.error_handling import ConfigurationError


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ConfigurationError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ConfigurationError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None or value == "":
        if required:
            raise ConfigurationError(
                f"Required environment variable '{key}' not found",
                details={"setting": key}
            )
        return default

    if validator:
        try:
            return validator(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for environment variable '{key}': {str(e)}",
                details={"setting": key, "value": value}
            ) from e

    return value


def bool_validator(value: str) -> bool:
    """Validate and convert string to boolean."""
    return value.lower() in ("true", "1", "yes", "y", "on")


def int_validator(value: str) -> int:
    """Validate and convert string to integer.

    Raises:
        ValueError: If not a valid integer
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")


def float_validator(value: str) -> float:
    """Validate and convert string to float.

    Raises:
        ValueError: If not a valid number
    """
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")


def url_validator(value: str) -> str:
    """Validate URL format.

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level.

    Raises:
        ValueError: If not a valid commitment level
    """
    valid_commitments = ("processed", "confirmed", "finalized")
    if value.lower() not in valid_commitments:
        raise ValueError(f"Commitment must be one of: {', '.join(valid_commitments)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level.

    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


def csv_list_validator(value: str) -> Tuple[str, ...]:
    """Split a comma separated list, dropping blanks."""
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    if not items:
        raise ValueError("Expected at least one comma separated value")
    return items


@dataclass(frozen=True)
class SolanaConfig:
    """Configuration for Solana RPC connection."""

    rpc_url: str = "https://api.mainnet-beta.solana.com"
    commitment: str = "confirmed"
    timeout: float = 30.0  # seconds
    max_retries: int = 0

    def validate(self) -> None:
        """Validate Solana settings.

        Raises:
            ConfigurationError: If settings are invalid
        """
        if not self.rpc_url:
            raise ConfigurationError(
                "Solana RPC URL is required",
                details={"setting": "rpc_url"}
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                "Request timeout must be positive",
                details={"setting": "timeout", "value": self.timeout}
            )
        if self.max_retries < 0:
            raise ConfigurationError(
                "Max retries must be non-negative",
                details={"setting": "max_retries", "value": self.max_retries}
            )


@dataclass(frozen=True)
class SolscanConfig:
    """Configuration for the Solscan Pro API (labels, tags, transfers)."""

    api_key: Optional[str] = None
    base_url: str = "https://pro-api.solscan.io/v2.0"
    timeout: float = 30.0
    metadata_cache_size: int = 5000
    metadata_cache_ttl: int = 3600  # seconds

    @property
    def has_api_key(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)

    def validate(self) -> None:
        """Validate Solscan settings.

        Raises:
            ConfigurationError: If settings are invalid
        """
        if self.timeout <= 0:
            raise ConfigurationError(
                "Request timeout must be positive",
                details={"setting": "timeout", "value": self.timeout}
            )
        if self.metadata_cache_size <= 0:
            raise ConfigurationError(
                "Metadata cache size must be positive",
                details={"setting": "metadata_cache_size", "value": self.metadata_cache_size}
            )


@dataclass(frozen=True)
class AnalysisConfig:
    """Thresholds, caps and throttling for holder classification and supply scans."""

    top_holders_limit: int = 20

    # Transfer history sampling
    history_page_size: int = 100
    history_max_records: int = 1000
    history_page_delay: float = 0.2

    # Bounded classification loop
    holder_delay: float = 0.1

    # Metadata lookups during exhaustive scans
    metadata_max_checks: int = 300
    metadata_min_balance_bps: float = 1.0
    metadata_batch_size: int = 10
    metadata_batch_delay: float = 0.2

    lock_keywords: Tuple[str, ...] = DEFAULT_LOCK_LABEL_KEYWORDS
    extra_token_program_ids: Tuple[str, ...] = (TOKEN_2022_PROGRAM_ID,)

    # Full-scan holders at or above this share of supply are logged
    large_holder_log_pct: float = 1.0

    def validate(self) -> None:
        """Validate analysis settings.

        Raises:
            ConfigurationError: If settings are invalid
        """
        positive = {
            "top_holders_limit": self.top_holders_limit,
            "history_page_size": self.history_page_size,
            "history_max_records": self.history_max_records,
            "metadata_batch_size": self.metadata_batch_size,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ConfigurationError(
                    f"{name} must be positive",
                    details={"setting": name, "value": value}
                )

        non_negative = {
            "history_page_delay": self.history_page_delay,
            "holder_delay": self.holder_delay,
            "metadata_max_checks": self.metadata_max_checks,
            "metadata_min_balance_bps": self.metadata_min_balance_bps,
            "metadata_batch_delay": self.metadata_batch_delay,
        }
        for name, value in non_negative.items():
            if value < 0:
                raise ConfigurationError(
                    f"{name} must be non-negative",
                    details={"setting": name, "value": value}
                )


@dataclass(frozen=True)
class ReportConfig:
    """Configuration for CSV report generation."""

    output_dir: str = "reports"
    include_full_split: bool = False
    max_detail_rows: int = 20


@dataclass(frozen=True)
class AppConfig:
    """Comprehensive application configuration."""

    solana: SolanaConfig = field(default_factory=SolanaConfig)
    solscan: SolscanConfig = field(default_factory=SolscanConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    log_level: str = "INFO"

    def validate(self) -> None:
        """Validate all settings.

        Raises:
            ConfigurationError: If any settings are invalid
        """
        self.solana.validate()
        self.solscan.validate()
        self.analysis.validate()


def load_app_config(env_file: Optional[str] = None) -> AppConfig:
    """Build the application configuration from environment variables.

    Args:
        env_file: Optional path of a ``.env`` file to load first

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If environment variables fail validation
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    analysis_defaults = AnalysisConfig()

    config = AppConfig(
        solana=SolanaConfig(
            rpc_url=get_env_var("SOLANA_RPC_ENDPOINT", SolanaConfig.rpc_url,
                                validator=url_validator),
            commitment=get_env_var("SOLANA_COMMITMENT", "confirmed",
                                   validator=commitment_validator),
            timeout=get_env_var("SOLANA_TIMEOUT", 30.0, validator=float_validator),
            max_retries=get_env_var("SOLANA_MAX_RETRIES", 0, validator=int_validator),
        ),
        solscan=SolscanConfig(
            api_key=get_env_var("SOLSCAN_API_KEY"),
            base_url=get_env_var("SOLSCAN_BASE_URL", SolscanConfig.base_url,
                                 validator=url_validator),
            timeout=get_env_var("SOLSCAN_TIMEOUT", 30.0, validator=float_validator),
            metadata_cache_size=get_env_var("METADATA_CACHE_SIZE", 5000, validator=int_validator),
            metadata_cache_ttl=get_env_var("METADATA_CACHE_TTL", 3600, validator=int_validator),
        ),
        analysis=AnalysisConfig(
            top_holders_limit=get_env_var("TOP_HOLDERS_LIMIT", 20, validator=int_validator),
            history_page_size=get_env_var("HISTORY_PAGE_SIZE", 100, validator=int_validator),
            history_max_records=get_env_var("HISTORY_MAX_RECORDS", 1000, validator=int_validator),
            history_page_delay=get_env_var("HISTORY_PAGE_DELAY", 0.2, validator=float_validator),
            holder_delay=get_env_var("HOLDER_DELAY", 0.1, validator=float_validator),
            metadata_max_checks=get_env_var("METADATA_MAX_CHECKS", 300, validator=int_validator),
            metadata_min_balance_bps=get_env_var("METADATA_MIN_BALANCE_BPS", 1.0,
                                                 validator=float_validator),
            metadata_batch_size=get_env_var("METADATA_BATCH_SIZE", 10, validator=int_validator),
            metadata_batch_delay=get_env_var("METADATA_BATCH_DELAY", 0.2, validator=float_validator),
            lock_keywords=get_env_var("LOCK_LABEL_KEYWORDS", analysis_defaults.lock_keywords,
                                      validator=csv_list_validator),
            extra_token_program_ids=get_env_var("EXTRA_TOKEN_PROGRAM_IDS",
                                                analysis_defaults.extra_token_program_ids,
                                                validator=csv_list_validator),
        ),
        report=ReportConfig(
            output_dir=get_env_var("REPORT_OUTPUT_DIR", "reports"),
            include_full_split=get_env_var("REPORT_INCLUDE_FULL_SPLIT", False,
                                           validator=bool_validator),
            max_detail_rows=get_env_var("REPORT_MAX_DETAIL_ROWS", 20, validator=int_validator),
        ),
        log_level=get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator),
    )

    config.validate()
    return config
