"""
Configuration parser for Daybook.

Handles TOML file parsing and secure password retrieval via external programs.
"""

import tomllib
import subprocess
import os
import sys
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

import pytz

from .event_storage import get_default_storage_dir
from .models import EventColor


@dataclass
class RemoteAccount:
    """Configuration for the CalDAV calendar used by sync."""
    url: str
    username: str
    password_key: str
    calendar: Optional[str] = None  # calendar display name, first one if unset
    import_limit: int = 100

    _password: Optional[str] = field(default=None, repr=False)

    def get_password(self, password_program: str) -> str:
        """Retrieve password using the configured password program."""
        if self._password is None:
            try:
                result = subprocess.run(
                    [password_program, self.password_key],
                    capture_output=True,
                    text=True,
                    timeout=30
                )
                if result.returncode == 0:
                    self._password = result.stdout.strip()
                else:
                    raise RuntimeError(
                        f"Password program failed for key '{self.password_key}': {result.stderr}"
                    )
            except subprocess.TimeoutExpired:
                raise RuntimeError(f"Password program timed out for key '{self.password_key}'")
            except FileNotFoundError:
                raise RuntimeError(f"Password program not found: {password_program}")
        return self._password


@dataclass
class SubscriptionConfig:
    """Configuration for a read-only ICS feed."""
    name: str
    url: str
    color: EventColor = EventColor.GREEN


def _parse_color(value: Optional[str], default: EventColor) -> EventColor:
    if not value:
        return default
    try:
        return EventColor(value)
    except ValueError:
        print(f"WARNING: unknown color {value!r}, using {default.value}", file=sys.stderr)
        return default


@dataclass
class Config:
    """Main configuration container for Daybook."""

    storage_dir: Path = field(default_factory=get_default_storage_dir)
    timezone: str = "Europe/Amsterdam"
    week_starts_on: int = 0  # 0=Sunday
    default_color: EventColor = EventColor.BLUE
    password_program: str = "/usr/bin/pass"
    remote: Optional[RemoteAccount] = None
    subscriptions: list[SubscriptionConfig] = field(default_factory=list)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'daybook' / 'daybook.toml'

    @classmethod
    def default(cls) -> 'Config':
        return cls()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        # Parse General section
        general = data.get('General', {})

        storage_dir = get_default_storage_dir()
        if general.get('storage_dir'):
            storage_dir = Path(os.path.expanduser(general['storage_dir']))

        timezone = general.get('timezone', 'Europe/Amsterdam')
        try:
            pytz.timezone(timezone)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {timezone}")

        week_starts_on = general.get('week_starts_on', 0)
        if not isinstance(week_starts_on, int) or not 0 <= week_starts_on <= 6:
            raise ValueError(f"week_starts_on must be 0..6, got {week_starts_on!r}")

        # Parse Remote section
        remote = None
        remote_data = data.get('Remote')
        if isinstance(remote_data, dict) and remote_data.get('url'):
            remote = RemoteAccount(
                url=remote_data['url'],
                username=remote_data.get('username', ''),
                password_key=remote_data.get('password_key', ''),
                calendar=remote_data.get('calendar'),
                import_limit=remote_data.get('import_limit', 100),
            )

        # Parse ICS subscriptions
        # Supports both [Subscription.Name] and [Subscription] with nested sub-tables
        subscriptions = []
        for key, value in data.items():
            if key.startswith('Subscription.') and isinstance(value, dict):
                entries = [(key.split('.', 1)[1], value)]
            elif key == 'Subscription' and isinstance(value, dict):
                entries = [(k, v) for k, v in value.items() if isinstance(v, dict)]
            else:
                continue

            for sub_id, sub_value in entries:
                subscriptions.append(SubscriptionConfig(
                    name=sub_value.get('name', sub_id),
                    url=sub_value.get('url', ''),
                    color=_parse_color(sub_value.get('color'), EventColor.GREEN),
                ))

        return cls(
            storage_dir=storage_dir,
            timezone=timezone,
            week_starts_on=week_starts_on,
            default_color=_parse_color(general.get('default_color'), EventColor.BLUE),
            password_program=general.get('password_program', '/usr/bin/pass'),
            remote=remote,
            subscriptions=subscriptions,
        )
