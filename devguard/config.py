"""Configuration Module - Loads devguard.toml and provides defaults."""

import json
import logging
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "devguard.toml"


class FailOn(Enum):
    """Severity threshold at which the policy fails."""
    WARNING = "warning"
    ERROR = "error"
    NONE = "none"


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "config"
        problems.append(f"{location}: {item['msg']}")
    return "invalid config: " + "; ".join(problems)


class GeneralConfig(BaseModel):
    """Policy and output settings."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    fail_on: FailOn = FailOn.WARNING
    min_score: StrictInt = Field(default=80, ge=0, le=100)
    json_output: StrictBool = Field(default=False, alias="json")


class ScanConfig(BaseModel):
    """Repository walk settings."""

    model_config = ConfigDict(extra="ignore")

    exclude: List[StrictStr] = Field(default_factory=lambda: [
        "node_modules",
        "target",
        ".git",
        "dist",
        "build",
        ".next",
    ])
    max_file_size_kb: StrictInt = Field(default=512, ge=0)
    parallel: StrictBool = False
    max_workers: StrictInt = Field(default=4, ge=1)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_kb * 1024


class EnvConfig(BaseModel):
    """Environment variable and dotenv settings."""

    model_config = ConfigDict(extra="ignore")

    required: List[StrictStr] = Field(default_factory=lambda: ["DATABASE_URL"])
    forbid_commit: List[StrictStr] = Field(default_factory=lambda: [
        ".env",
        ".env.local",
        ".env.production",
        "serviceAccount.json",
    ])
    dotenv_files: List[StrictStr] = Field(default_factory=lambda: [
        ".env",
        ".env.local",
        ".env.development",
        ".env.production",
    ])
    example_files: List[StrictStr] = Field(default_factory=lambda: [
        ".env.example",
        ".env.template",
    ])


class ScoringConfig(BaseModel):
    """Per-severity penalties and label band thresholds."""

    model_config = ConfigDict(extra="ignore")

    critical: StrictInt = 30
    warning: StrictInt = 15
    info: StrictInt = 5
    excellent: StrictInt = 90
    good: StrictInt = 75
    fair: StrictInt = 50

    @model_validator(mode="after")
    def _validate_order(self) -> "ScoringConfig":
        if not self.critical >= self.warning >= self.info >= 0:
            raise ValueError(
                "penalties must satisfy critical >= warning >= info >= 0 "
                f"(got critical={self.critical}, warning={self.warning}, info={self.info})"
            )
        if not 100 >= self.excellent > self.good > self.fair > 0:
            raise ValueError(
                "bands must satisfy 100 >= excellent > good > fair > 0 "
                f"(got excellent={self.excellent}, good={self.good}, fair={self.fair})"
            )
        return self


class SupabaseConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: StrictBool = True
    require_migrations: StrictBool = True
    migrations_dir: StrictStr = "supabase/migrations"
    forbid_service_role_in_client: StrictBool = True


class VercelConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: StrictBool = True


class StripeConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: StrictBool = True
    warn_live_keys: StrictBool = True


class ProvidersConfig(BaseModel):
    """Per-provider settings, keyed by provider name."""

    model_config = ConfigDict(extra="ignore")

    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    vercel: VercelConfig = Field(default_factory=VercelConfig)
    stripe: StripeConfig = Field(default_factory=StripeConfig)

    def get(self, name: str):
        """Get a provider section by provider name."""
        if name not in type(self).model_fields:
            raise ConfigError(f"unknown provider: {name}")
        return getattr(self, name)


class Config(BaseModel):
    """Resolved devguard configuration."""

    model_config = ConfigDict(extra="ignore")

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    env: EnvConfig = Field(default_factory=EnvConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    source: Optional[Path] = Field(default=None, exclude=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> "Config":
        """Create a config from a parsed TOML document.

        Args:
            data: Parsed TOML document
            source: File the document was read from

        Returns:
            Config with defaults for every missing key

        Raises:
            ConfigError: If a value has the wrong type or is out of range
        """
        document = {key: value for key, value in data.items() if key != "source"}
        try:
            config = cls.model_validate(document)
        except ValidationError as e:
            raise ConfigError(_format_validation_error(e)) from None
        config.source = source
        return config


def load_config(cli_config_path: Optional[str | Path], cwd: str | Path) -> Config:
    """Resolve the configuration for a run.

    Resolution order: explicit --config path, then ./devguard.toml, then
    built-in defaults.

    Args:
        cli_config_path: Path passed with --config, if any
        cwd: Working directory used to look up devguard.toml

    Returns:
        Resolved Config

    Raises:
        ConfigError: If the explicit path is missing or any file is invalid
    """
    if cli_config_path is not None:
        path = Path(cli_config_path)
        if not path.exists():
            raise ConfigError(f"config file not found at {path} (passed with --config)")
        logger.debug("using config from --config: %s", path)
        return read_config(path)

    local_path = Path(cwd) / CONFIG_FILENAME
    if local_path.exists():
        logger.debug("using config from %s", local_path)
        return read_config(local_path)

    logger.debug("no config file found, using defaults")
    return Config()


def read_config(path: Path) -> Config:
    """Read and validate a TOML config file.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"failed reading config file {path}: {e}") from e
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed parsing config file {path}: {e}") from e
    return Config.from_dict(data, source=path)


DEFAULT_CONFIG_TEMPLATE = """\
# devguard configuration

[general]
# fail the run on: "warning" (warning or critical), "error" (critical only), "none"
fail_on = {fail_on}
min_score = {min_score}
json = {json}

[scan]
exclude = {exclude}
max_file_size_kb = {max_file_size_kb}
parallel = {parallel}
max_workers = {max_workers}

[env]
required = {required}
forbid_commit = {forbid_commit}
dotenv_files = {dotenv_files}
example_files = {example_files}

[scoring]
# points subtracted per issue
critical = {critical}
warning = {warning}
info = {info}
# minimum score for each label
excellent = {excellent}
good = {good}
fair = {fair}

[providers.supabase]
enabled = {supabase_enabled}
require_migrations = {require_migrations}
migrations_dir = {migrations_dir}
forbid_service_role_in_client = {forbid_service_role_in_client}

[providers.vercel]
enabled = {vercel_enabled}

[providers.stripe]
enabled = {stripe_enabled}
warn_live_keys = {warn_live_keys}
"""


def default_config_toml() -> str:
    """Render the default configuration as TOML.

    JSON string, list and boolean literals are valid TOML for the values
    used here.
    """
    config = Config()
    v = json.dumps
    return DEFAULT_CONFIG_TEMPLATE.format(
        fail_on=v(config.general.fail_on.value),
        min_score=config.general.min_score,
        json=v(config.general.json_output),
        exclude=v(config.scan.exclude),
        max_file_size_kb=config.scan.max_file_size_kb,
        parallel=v(config.scan.parallel),
        max_workers=config.scan.max_workers,
        required=v(config.env.required),
        forbid_commit=v(config.env.forbid_commit),
        dotenv_files=v(config.env.dotenv_files),
        example_files=v(config.env.example_files),
        critical=config.scoring.critical,
        warning=config.scoring.warning,
        info=config.scoring.info,
        excellent=config.scoring.excellent,
        good=config.scoring.good,
        fair=config.scoring.fair,
        supabase_enabled=v(config.providers.supabase.enabled),
        require_migrations=v(config.providers.supabase.require_migrations),
        migrations_dir=v(config.providers.supabase.migrations_dir),
        forbid_service_role_in_client=v(config.providers.supabase.forbid_service_role_in_client),
        vercel_enabled=v(config.providers.vercel.enabled),
        stripe_enabled=v(config.providers.stripe.enabled),
        warn_live_keys=v(config.providers.stripe.warn_live_keys),
    )


def write_default_config(path: str | Path) -> Path:
    """Write the default configuration file.

    Raises:
        ConfigError: If the file already exists or cannot be written
    """
    path = Path(path)
    if path.exists():
        raise ConfigError(f"refusing to overwrite existing config file: {path}")
    try:
        path.write_text(default_config_toml(), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed writing {path}: {e}") from e
    return path
