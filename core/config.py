"""Bridge connection settings.

Credentials come from HUE_BRIDGE_IP / HUE_APPLICATION_KEY when both are set,
otherwise from ~/.hue_home/config.json (written by 'configure'). Everything
else has a default and can be overridden per call of load_bridge_config.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path

import click

from models.types import AuthCredentials

USER_CONFIG_FILE = Path.home() / '.hue_home' / 'config.json'

DEFAULT_TIMEOUT = 5
# Pause after a grouped_light write before trusting bridge state again
DEFAULT_SETTLE_DELAY = 2.0
DEFAULT_THROTTLE_INTERVAL = 1.0


@dataclass(frozen=True)
class BridgeConfig:
    """Connection settings for one bridge, fixed for the life of the process."""
    bridge_ip: str
    application_key: str
    timeout: float = DEFAULT_TIMEOUT
    settle_delay: float = DEFAULT_SETTLE_DELAY
    throttle_interval: float = DEFAULT_THROTTLE_INTERVAL
    ca_bundle: str | None = None

    @property
    def base_url(self) -> str:
        return f"https://{self.bridge_ip}/clip/v2"


def _credentials(bridge_ip, api_token) -> AuthCredentials | None:
    if isinstance(bridge_ip, str) and isinstance(api_token, str) and bridge_ip and api_token:
        return AuthCredentials(bridge_ip=bridge_ip, api_token=api_token)
    return None


def _read_json(path: Path) -> dict:
    with path.open() as f:
        return json.load(f)


def load_auth_from_env() -> AuthCredentials | None:
    return _credentials(os.environ.get('HUE_BRIDGE_IP'), os.environ.get('HUE_APPLICATION_KEY'))


def load_auth_from_user_config(config_file: Path = USER_CONFIG_FILE) -> AuthCredentials | None:
    """Credentials saved by 'configure', or None if missing or unreadable."""
    if not config_file.exists():
        return None

    try:
        saved = _read_json(config_file)
    except (json.JSONDecodeError, OSError) as e:
        click.echo(f"Warning: Failed to load config from {config_file}: {e}", err=True)
        return None

    if not isinstance(saved, dict):
        return None
    return _credentials(saved.get('bridge_ip'), saved.get('api_token'))


def load_bridge_config(config_file: Path = USER_CONFIG_FILE, **overrides) -> BridgeConfig | None:
    """Build a BridgeConfig from the environment, falling back to the config file.

    Args:
        config_file: Path of the user config file
        **overrides: BridgeConfig fields to set explicitly (e.g. settle_delay)

    Returns:
        BridgeConfig, or None if no complete credentials were found
    """
    auth = load_auth_from_env() or load_auth_from_user_config(config_file)
    if auth is None:
        return None

    overrides.setdefault('ca_bundle', os.environ.get('HUE_CA_BUNDLE'))
    return BridgeConfig(bridge_ip=auth['bridge_ip'], application_key=auth['api_token'], **overrides)


def save_bridge_config(bridge_ip: str, api_token: str, config_file: Path = USER_CONFIG_FILE) -> bool:
    """Store credentials in the user config file, readable by the owner only.

    Other keys already in the file are kept.

    Returns:
        True if saved successfully, False otherwise
    """
    existing = {}
    try:
        existing = _read_json(config_file)
    except (FileNotFoundError, json.JSONDecodeError):
        pass
    if not isinstance(existing, dict):
        existing = {}

    existing.update(bridge_ip=bridge_ip, api_token=api_token)

    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(json.dumps(existing, indent=2))
        config_file.chmod(0o600)
    except OSError as e:
        click.echo(f"Error: Failed to save config to {config_file}: {e}", err=True)
        return False
    return True
