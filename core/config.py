"""Configuration loading and logging setup."""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

from core.units import parse_size
from models.errors import ConfigurationError
from models.validation import SafetyConfig
from validation.classifier import create_classifier
from validation.validators import SafetyGate

# Load environment variables
load_dotenv()

CONFIG_FILE_NAME = "bins.cfg"
CONFIG_PATH_ENV = "BINS_CONFIG"
SERVICE_ENV_PREFIX = "BINS_"
SERVICE_SECTIONS = ("gist", "pastebin", "hastebin", "bitbucket", "pastegg")

DEFAULT_CONFIG_TEXT = """\
[general]
# The file size limit for uploads. If any file is larger than this, bins will not upload it unless it is forced to with
# --force.
# Note that this does not stop --message or stdin, only files.
# Supports kB, MB, GB, KiB, MiB, and GiB.
file_size_limit = "1 MiB"

[safety]
# List of file-name patterns to disallow uploading. bins will not upload any files that match this pattern unless it is
# forced to with --force.
disallowed_file_patterns = ["*.cfg", "*.conf", "*.key", "secrets.zsh"]

# List of libmagic file types to disallow. This configuration option is ignored unless python-magic and libmagic are
# installed. bins will not upload any files matching a disallowed type unless it is forced to with --force.
disallowed_file_types = ["PEM RSA private key"]

# If this is true, attempting to use unsupported features with a bin on the command line will stop the program before
# anything is uploaded.
# This only affects --private and --auth.
cancel_on_unsupported = true

# If this is true, bins will emit a warning when attempting to use an unsupported feature with a bin on the command
# line.
warn_on_unsupported = true

[defaults]
# If this is true, all pastes will be created as private or unlisted.
# Using the command-line option `--public` or `--private` will change this behavior.
private = true

# If this is true, all pastes will be made to accounts or with API keys defined in this file.
# Pastebin and Bitbucket ignore this setting and the command-line argument, since they always require credentials.
# Using the command-line option `--auth` or `--anon` will change this behavior.
authed = true

# Uncomment this line if you want to set a default service to use with bins. This will make the `--service` option
# optional and use the configured service if the option is not specified.
# bin = "gist"

# If this is true, all commands will copy their output to the system clipboard.
# Using the command-line option `--copy` or `--no-copy` will change this behavior.
copy = true

[gist]
# The username to use for gist.github.com. This is ignored if access_token is empty.
username = ""

# Access token to use to log in to gist.github.com. If this is empty, an anonymous gist will be made.
access_token = ""

[pastebin]
# The API key for pastebin.com. If this is empty, all paste attempts to the pastebin service will fail.
api_key = ""

[hastebin]
# The server to use with the hastebin bin.
server = "https://hastebin.com"

[bitbucket]
# BitBucket username
username = ""
# BitBucket app password
app_password = ""

[pastegg]
# API key from https://paste.gg/account/keys
key = ""
"""


@dataclass(frozen=True)
class DefaultsConfig:
    """Request defaults that command-line flags override."""
    private: bool = True
    authed: bool = True
    copy: bool = False
    bin: Optional[str] = None


@dataclass(frozen=True)
class BinsConfig:
    """Process-wide configuration, immutable once loaded."""
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    services: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: MappingProxyType({}))
    source: Optional[Path] = None

    def service_section(self, service: str) -> Mapping[str, Any]:
        """Opaque per-service settings (credentials, endpoints)."""
        return self.services.get(service, MappingProxyType({}))


def _expect(section: Dict[str, Any], key: str, kind: type, default: Any, section_name: str) -> Any:
    value = section.get(key, default)
    if value is None or isinstance(value, kind):
        return value
    raise ConfigurationError(f"{section_name}.{key} must be of type {kind.__name__}, got {type(value).__name__}")


def _expect_strings(section: Dict[str, Any], key: str, section_name: str) -> List[str]:
    values = _expect(section, key, list, [], section_name)
    if not all(isinstance(v, str) for v in values):
        raise ConfigurationError(f"{section_name}.{key} must be a list of strings")
    return values


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{name}] must be a table")
    return section


def _apply_env_overrides(name: str, section: Dict[str, Any]) -> Dict[str, Any]:
    """Environment variables like ``BINS_GIST_ACCESS_TOKEN`` override service settings."""
    merged = dict(section)
    prefix = f"{SERVICE_ENV_PREFIX}{name.upper()}_"
    for env_key, env_value in os.environ.items():
        if env_key.startswith(prefix) and env_value:
            merged[env_key[len(prefix):].lower()] = env_value
    return merged


def parse_config(data: Dict[str, Any], source: Optional[Path] = None) -> BinsConfig:
    """
    Build a BinsConfig from parsed TOML data.

    Args:
        data: Parsed TOML document
        source: File the data came from, if any

    Raises:
        ConfigurationError: If a value has the wrong type
        InvalidSizeFormat: If general.file_size_limit cannot be parsed
    """
    general = _section(data, "general")
    safety = _section(data, "safety")
    defaults = _section(data, "defaults")

    size_text = _expect(general, "file_size_limit", str, None, "general")
    file_size_limit = parse_size(size_text) if size_text is not None else None

    safety_config = SafetyConfig(
        file_size_limit=file_size_limit,
        disallowed_file_patterns=frozenset(_expect_strings(safety, "disallowed_file_patterns", "safety")),
        disallowed_file_types=frozenset(_expect_strings(safety, "disallowed_file_types", "safety")),
        cancel_on_unsupported=bool(_expect(safety, "cancel_on_unsupported", bool, True, "safety")),
        warn_on_unsupported=bool(_expect(safety, "warn_on_unsupported", bool, True, "safety")),
    )

    default_bin = _expect(defaults, "bin", str, None, "defaults")
    defaults_config = DefaultsConfig(
        private=bool(_expect(defaults, "private", bool, True, "defaults")),
        authed=bool(_expect(defaults, "authed", bool, True, "defaults")),
        copy=bool(_expect(defaults, "copy", bool, False, "defaults")),
        bin=(default_bin.strip() or None) if default_bin else None,
    )

    services = {}
    for name in SERVICE_SECTIONS:
        services[name] = MappingProxyType(_apply_env_overrides(name, _section(data, name)))

    return BinsConfig(
        safety=safety_config,
        defaults=defaults_config,
        services=MappingProxyType(services),
        source=source,
    )


def candidate_config_paths() -> List[Path]:
    """Config locations in lookup order."""
    paths = []
    xdg_dir = os.getenv("XDG_CONFIG_DIR")
    if xdg_dir:
        paths.append(Path(xdg_dir) / CONFIG_FILE_NAME)
    home_dir = os.getenv("HOME")
    if home_dir:
        paths.append(Path(home_dir) / ".config" / CONFIG_FILE_NAME)
        paths.append(Path(home_dir) / f".{CONFIG_FILE_NAME}")
    return paths


def find_config_path() -> Optional[Path]:
    """Return the first existing config file, if any."""
    for path in candidate_config_paths():
        if path.is_file():
            return path
    return None


def create_default_config() -> Path:
    """
    Write the default configuration to the first location whose directory exists.

    Raises:
        ConfigurationError: If no location is writable
    """
    for path in candidate_config_paths():
        if path.parent.is_dir() and not path.exists():
            try:
                path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")
            except OSError as e:
                logging.getLogger(__name__).debug(f"could not write default config to {path}: {e}")
                continue
            logging.getLogger(__name__).info(f"created default configuration at {path}")
            return path
    raise ConfigurationError("could not create a bins config file (set XDG_CONFIG_DIR or HOME)")


def load_config(path: Optional[Path] = None) -> BinsConfig:
    """
    Load the configuration once at startup.

    Lookup order: explicit ``path``, ``$BINS_CONFIG``, ``$XDG_CONFIG_DIR/bins.cfg``,
    ``~/.config/bins.cfg``, ``~/.bins.cfg``. When nothing exists the default
    configuration is written and loaded.
    """
    if path is None and os.getenv(CONFIG_PATH_ENV):
        path = Path(os.environ[CONFIG_PATH_ENV])
    if path is None:
        path = find_config_path() or create_default_config()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"config file {path} does not exist") from e
    except OSError as e:
        raise ConfigurationError(f"could not read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"could not parse configuration file {path}: {e}") from e

    return parse_config(data, source=Path(path))


def create_safety_gate(config: BinsConfig) -> SafetyGate:
    """Create the safety gate, with content classification when libmagic is available."""
    return SafetyGate(config.safety, create_classifier())


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    log_format = "%(levelname)s: %(message)s"
    if log_level <= logging.DEBUG:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler()],
        force=True,
    )

    # Suppress some noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
