"""
Configuration for sending opt-out emails.

Identity and SMTP settings come from environment variables (or .env).
Missing or invalid values raise ConfigurationError before anything is sent.
"""

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from donotcontact.errors import ConfigurationError

load_dotenv()

_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def _get_bool(environ: Mapping[str, str], key: str, default: bool = False) -> bool:
    """Get a boolean from environment. "ssl/tls" counts as true."""
    val = environ.get(key, str(default)).strip().lower()
    return val in ('true', '1', 'yes', 'on', 'ssl', 'tls', 'ssl/tls')


def _get_int(environ: Mapping[str, str], key: str, default: int) -> int:
    """Get an integer from environment."""
    try:
        return int(environ.get(key, str(default)))
    except ValueError:
        return default


def _get_float(environ: Mapping[str, str], key: str, default: float) -> float:
    try:
        return float(environ.get(key, str(default)))
    except ValueError:
        return default


@dataclass
class Identity:
    """The person asking to be removed from mailing lists."""
    full_name: str
    salutation: str
    email: str
    phone: str
    street: str
    city: str
    state: str
    zip: str

    @property
    def full_address(self) -> str:
        return f"{self.street}, {self.city}, {self.state} {self.zip}"


@dataclass
class SmtpSettings:
    host: str
    port: int
    secure: bool  # implicit TLS (port 465); otherwise STARTTLS
    user: str
    password: str
    send_as: Optional[str] = None

    def from_address(self, identity: Identity) -> str:
        """The envelope sender: the send-as alias if set, else the identity email."""
        return self.send_as or identity.email


def build_config(environ: Optional[Mapping[str, str]] = None) -> dict:
    """Read the outreach configuration from a mapping (default: os.environ)."""
    env = os.environ if environ is None else environ
    return {
        # Identity
        'FULL_NAME': env.get('DNC_FULL_NAME', ''),
        'SALUTATION': env.get('DNC_SALUTATION', ''),
        'EMAIL': env.get('DNC_EMAIL', ''),
        'PHONE': env.get('DNC_PHONE', ''),
        'STREET': env.get('DNC_STREET', ''),
        'CITY': env.get('DNC_CITY', ''),
        'STATE': env.get('DNC_STATE', ''),
        'ZIP': env.get('DNC_ZIP', ''),

        # SMTP
        'SMTP_HOST': env.get('SMTP_HOST', ''),
        'SMTP_PORT': _get_int(env, 'SMTP_PORT', 587),
        'SMTP_SECURE': _get_bool(env, 'SMTP_SECURE', False),
        'SMTP_USER': env.get('SMTP_USER', ''),
        'SMTP_PASSWORD': env.get('SMTP_PASSWORD', ''),
        'SMTP_SEND_AS': env.get('SMTP_SEND_AS', ''),

        # Delay between sends (seconds)
        'SEND_DELAY_SECONDS': _get_float(env, 'SEND_DELAY_SECONDS', 2.0),
    }


OUTREACH_CONFIG = build_config()


def get_config() -> dict:
    """Get the outreach configuration."""
    return OUTREACH_CONFIG.copy()


def validate_config(cfg: Optional[dict] = None) -> list[str]:
    """Validate configuration and return list of errors."""
    cfg = OUTREACH_CONFIG if cfg is None else cfg
    errors = []

    required = {
        'FULL_NAME': 'DNC_FULL_NAME',
        'EMAIL': 'DNC_EMAIL',
        'PHONE': 'DNC_PHONE',
        'STREET': 'DNC_STREET',
        'CITY': 'DNC_CITY',
        'STATE': 'DNC_STATE',
        'ZIP': 'DNC_ZIP',
        'SMTP_HOST': 'SMTP_HOST',
        'SMTP_USER': 'SMTP_USER',
        'SMTP_PASSWORD': 'SMTP_PASSWORD',
    }
    for key, env_name in required.items():
        if not str(cfg.get(key, '')).strip():
            errors.append(f"{env_name} not set")

    if cfg.get('EMAIL') and not _EMAIL_RE.match(cfg['EMAIL']):
        errors.append(f"DNC_EMAIL is not a valid email address: {cfg['EMAIL']}")

    if cfg.get('SMTP_SEND_AS') and not _EMAIL_RE.match(cfg['SMTP_SEND_AS']):
        errors.append(f"SMTP_SEND_AS is not a valid email address: {cfg['SMTP_SEND_AS']}")

    port = cfg.get('SMTP_PORT')
    if not isinstance(port, int) or not 0 < port < 65536:
        errors.append(f"SMTP_PORT is not a valid port: {port}")

    return errors


def _raise_if_invalid(cfg: dict) -> None:
    errors = validate_config(cfg)
    if errors:
        details = "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(f"Invalid outreach configuration:\n{details}")


def load_identity(cfg: Optional[dict] = None) -> Identity:
    """Build the sender identity, raising ConfigurationError if anything is missing."""
    cfg = OUTREACH_CONFIG if cfg is None else cfg
    _raise_if_invalid(cfg)

    full_name = cfg['FULL_NAME'].strip()
    return Identity(
        full_name=full_name,
        salutation=cfg.get('SALUTATION', '').strip() or full_name.split()[0],
        email=cfg['EMAIL'].strip(),
        phone=cfg['PHONE'].strip(),
        street=cfg['STREET'].strip(),
        city=cfg['CITY'].strip(),
        state=cfg['STATE'].strip(),
        zip=cfg['ZIP'].strip(),
    )


def load_smtp_settings(cfg: Optional[dict] = None) -> SmtpSettings:
    """Build SMTP settings, raising ConfigurationError if anything is missing."""
    cfg = OUTREACH_CONFIG if cfg is None else cfg
    _raise_if_invalid(cfg)

    return SmtpSettings(
        host=cfg['SMTP_HOST'].strip(),
        port=cfg['SMTP_PORT'],
        secure=cfg['SMTP_SECURE'],
        user=cfg['SMTP_USER'].strip(),
        password=cfg['SMTP_PASSWORD'],
        send_as=cfg.get('SMTP_SEND_AS', '').strip() or None,
    )
