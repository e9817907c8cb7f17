# src/goldnexus/interfaces/api/security/auth.py
"""
Password hashing and JWT key material.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from passlib.context import CryptContext

from goldnexus.config import Settings, settings as default_settings

log = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Unrecognized or corrupt hash in storage.
        log.warning("Stored password hash could not be parsed.")
        return False


@dataclass(frozen=True)
class JwtKeys:
    private_key: str
    public_key: str


_keys: Optional[JwtKeys] = None


def _from_env(value: str) -> str:
    # PEM bodies in env vars usually arrive with literal "\n" sequences.
    return value.replace("\\n", "\n")


def load_jwt_keys(cfg: Settings = default_settings) -> JwtKeys:
    """
    Production: both keys must be set in the environment.
    Elsewhere: environment keys if set, otherwise the PEM files next to the app.
    """
    if cfg.JWT_PRIVATE_KEY and cfg.JWT_PUBLIC_KEY:
        return JwtKeys(_from_env(cfg.JWT_PRIVATE_KEY), _from_env(cfg.JWT_PUBLIC_KEY))

    if cfg.is_production:
        raise RuntimeError("JWT keys must be set in production environment")

    private_path, public_path = Path(cfg.JWT_PRIVATE_KEY_PATH), Path(cfg.JWT_PUBLIC_KEY_PATH)
    log.debug("Loading JWT keys from %s and %s", private_path, public_path)
    return JwtKeys(private_path.read_text(encoding="utf-8"), public_path.read_text(encoding="utf-8"))


def get_jwt_keys() -> JwtKeys:
    """Process-wide keys, loaded on first use."""
    global _keys
    if _keys is None:
        _keys = load_jwt_keys()
    return _keys
