import datetime
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from gwscli.access import (DEFAULT_SCOPES, SCOPES, GWSAccess, MissingCredentials, credentials_from_files,
                           expiry_from_millis, read_client_config)
from gwscli.cli import Context
from gwscli.config import GmailConfig, Settings

CLIENT = {'installed': {'client_id': "cid.apps.googleusercontent.com",
                        'client_secret': "secret",
                        'token_uri': "https://oauth2.googleapis.com/token"}}

TOKEN = {'access_token': "ya29.a", 'refresh_token': "1//r",
         'scope': "https://www.googleapis.com/auth/drive https://www.googleapis.com/auth/calendar",
         'token_type': "Bearer", 'expiry_date': 1705305600000}


def write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_settings_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GWSCLI_CREDENTIALS_DIR", str(tmp_path))
    monkeypatch.setenv("GWSCLI_TIMEZONE", "UTC")
    monkeypatch.setenv("GWSCLI_LOG_LEVEL", "debug")
    s = Settings()
    assert(s.credentials_dir == tmp_path)
    assert(s.timezone == "UTC")
    assert(s.log_level == "DEBUG")
    assert(s.client_file == tmp_path / "google-oauth-client.json")
    assert(s.token_file == tmp_path / "google-token.json")
    assert(s.gmail_config_file == tmp_path / "gmail-config.json")


def test_settings_defaults(monkeypatch):
    for name in ["GWSCLI_CREDENTIALS_DIR", "GWSCLI_TIMEZONE", "GWSCLI_LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)
    d = Settings()
    assert(d.timezone == "Asia/Bangkok")
    assert(d.log_level == "WARNING")
    assert(d.credentials_dir.name == "credentials")
    assert(str(Settings(credentials_dir="/tmp/x").credentials_dir) == "/tmp/x")
    assert(Settings(credentials_dir="~/creds").credentials_dir == Path.home() / "creds")


def test_gmail_config(tmp_path):
    missing = GmailConfig.load(tmp_path / "none.json")
    assert(missing == GmailConfig())
    assert(missing.block_on_placeholders and missing.warn_on_placeholders)
    p = write(tmp_path / "gmail-config.json", {'signature': "-- Sam", 'fromName': "Sam",
                                               'blockOnPlaceholders': False, 'other': 1})
    config = GmailConfig.load(p)
    assert(config.signature == "-- Sam")
    assert(config.from_name == "Sam")
    assert(not config.block_on_placeholders)
    assert(config.warn_on_placeholders)
    with pytest.raises(ValueError):
        GmailConfig.load(write(tmp_path / "bad.json", ["x"]))


@pytest.mark.parametrize("raw, expected", [
    ("false", False), ("False", False), ("off", False), ("0", False), (0, False),
    ("true", True), ("yes", True), (1, True),
])
def test_gmail_config_bool_spellings(tmp_path, raw, expected):
    config = GmailConfig.load(write(tmp_path / "gmail-config.json", {'blockOnPlaceholders': raw,
                                                                     'warnOnPlaceholders': raw}))
    assert(config.block_on_placeholders is expected)
    assert(config.warn_on_placeholders is expected)


def test_gmail_config_nulls_and_bad_values(tmp_path):
    config = GmailConfig.load(write(tmp_path / "gmail-config.json", {'signature': None, 'fromName': None}))
    assert(config.signature == "")
    assert(config.from_name == "")
    with pytest.raises(ValueError):
        GmailConfig.load(write(tmp_path / "gmail-config.json", {'blockOnPlaceholders': "maybe"}))
    assert(GmailConfig(blockOnPlaceholders=False) == GmailConfig(block_on_placeholders=False))


def test_scopes():
    assert(len(DEFAULT_SCOPES) == len(SCOPES))
    assert("https://www.googleapis.com/auth/gmail.modify" in DEFAULT_SCOPES)


def test_client_config(tmp_path):
    assert(read_client_config(write(tmp_path / "c.json", CLIENT))['client_id'] == "cid.apps.googleusercontent.com")
    assert(read_client_config(write(tmp_path / "w.json", {'web': {'client_id': "w"}}))['client_id'] == "w")
    with pytest.raises(MissingCredentials):
        read_client_config(write(tmp_path / "bad.json", {'other': {}}))
    with pytest.raises(MissingCredentials):
        read_client_config(tmp_path / "missing.json")


def test_expiry():
    assert(expiry_from_millis(1705305600000) == datetime.datetime(2024, 1, 15, 8, 0))
    assert(expiry_from_millis(None) is None)
    assert(expiry_from_millis(0) is None)


def test_credentials(tmp_path):
    creds = credentials_from_files(write(tmp_path / "c.json", CLIENT), write(tmp_path / "t.json", TOKEN))
    assert(creds.token == "ya29.a")
    assert(creds.refresh_token == "1//r")
    assert(creds.client_id == "cid.apps.googleusercontent.com")
    assert(creds.scopes == ["https://www.googleapis.com/auth/drive", "https://www.googleapis.com/auth/calendar"])
    assert(creds.expiry == datetime.datetime(2024, 1, 15, 8, 0))
    with pytest.raises(MissingCredentials):
        credentials_from_files(tmp_path / "c.json", tmp_path / "none.json")


def test_access_is_lazy(settings):
    access = GWSAccess(settings)
    assert(not access)
    assert(str(access) == "Unloaded")
    with pytest.raises(MissingCredentials):
        access.get_service("drive", "v3")


def test_access_caches_services(settings):
    write(settings.client_file, CLIENT)
    write(settings.token_file, TOKEN)
    access = GWSAccess(settings)
    with patch("gwscli.access.build") as build:
        first = access.drive()
        second = access.get_service("drive", "v3")
        access.sheets()
    assert(first is second)
    assert(build.call_count == 2)
    assert(build.call_args_list[0].args == ("drive", "v3"))
    assert(access)
    assert(str(access) == "Loaded:['drive:v3', 'sheets:v4']")


def test_context_gmail_config(settings, access):
    write(settings.gmail_config_file, {'signature': "sig"})
    ctx = Context(settings=settings, access=access)
    assert(ctx.gmail_config.signature == "sig")
    assert(ctx.now().tzinfo is not None)
    assert(ctx.drive() is access.get_service("drive", "v3"))
