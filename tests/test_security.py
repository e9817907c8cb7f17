from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Response

from goldnexus.config import Settings
from goldnexus.domain.entities import TokenPair
from goldnexus.interfaces.api.security.auth import hash_password, load_jwt_keys, verify_password
from goldnexus.interfaces.api.security.cookies import build_cookie_transport


def test_password_hash_round_trip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("other-pass", hashed)


def test_corrupt_hash_does_not_verify():
    assert not verify_password("s3cret-pass", "not-a-hash")


def test_env_keys_have_escaped_newlines_restored(rsa_keys):
    private_key, public_key = rsa_keys
    cfg = Settings(
        ENV="production",
        JWT_PRIVATE_KEY=private_key.replace("\n", "\\n"),
        JWT_PUBLIC_KEY=public_key.replace("\n", "\\n"),
    )
    keys = load_jwt_keys(cfg)
    assert keys.private_key == private_key
    assert keys.public_key == public_key


def test_production_requires_env_keys():
    cfg = Settings(ENV="production", JWT_PRIVATE_KEY=None, JWT_PUBLIC_KEY=None)
    with pytest.raises(RuntimeError, match="production"):
        load_jwt_keys(cfg)


def test_development_reads_key_files(tmp_path, rsa_keys):
    private_key, public_key = rsa_keys
    (tmp_path / "private.pem").write_text(private_key)
    (tmp_path / "public.pem").write_text(public_key)
    cfg = Settings(
        ENV="dev",
        JWT_PRIVATE_KEY=None,
        JWT_PUBLIC_KEY=None,
        JWT_PRIVATE_KEY_PATH=str(tmp_path / "private.pem"),
        JWT_PUBLIC_KEY_PATH=str(tmp_path / "public.pem"),
    )
    keys = load_jwt_keys(cfg)
    assert keys.private_key == private_key


def test_development_without_key_files_fails(tmp_path):
    cfg = Settings(
        ENV="dev",
        JWT_PRIVATE_KEY=None,
        JWT_PUBLIC_KEY=None,
        JWT_PRIVATE_KEY_PATH=str(tmp_path / "missing.pem"),
        JWT_PUBLIC_KEY_PATH=str(tmp_path / "missing.pub"),
    )
    with pytest.raises(FileNotFoundError):
        load_jwt_keys(cfg)


def _pair() -> TokenPair:
    now = datetime.now(timezone.utc)
    return TokenPair("access", "refresh", now + timedelta(minutes=15), now + timedelta(days=30))


def test_production_cookies_are_secure():
    transport = build_cookie_transport(Settings(ENV="production"))
    response = transport.attach(Response(), _pair())

    cookies = response.headers.getlist("set-cookie")
    assert len(cookies) == 2
    assert all("Secure" in c and "SameSite=strict" in c for c in cookies)


def test_revoke_all_blanks_both_cookies():
    transport = build_cookie_transport(Settings(ENV="dev"))
    response = transport.revoke_all(Response())

    cookies = response.headers.getlist("set-cookie")
    assert sorted(c.split("=", 1)[0] for c in cookies) == ["accessToken", "refreshToken"]
    assert all('=""' in c or "=;" in c for c in cookies)
    assert all("Max-Age=0" in c for c in cookies)
