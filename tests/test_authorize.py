import datetime
import json
from unittest.mock import MagicMock

import pytest

from gwscli import authorize as auth
from gwscli.access import DEFAULT_SCOPES


def fake_creds():
    creds = MagicMock()
    creds.token = "ya29.new"
    creds.refresh_token = "1//refresh"
    creds.scopes = ["a", "b"]
    creds.expiry = datetime.datetime(2024, 1, 15, 8, 0)
    return creds


def test_token_dict():
    d = auth.token_to_dict(fake_creds())
    assert(d == {'access_token': "ya29.new", 'refresh_token': "1//refresh", 'scope': "a b",
                 'token_type': "Bearer", 'expiry_date': 1705305600000})
    creds = fake_creds()
    creds.expiry = None
    assert('expiry_date' not in auth.token_to_dict(creds))


def test_missing_client(settings, capsys):
    assert(auth.authorize(settings) == 1)
    err = capsys.readouterr().err
    assert("OAuth client credentials not found" in err)
    assert(str(settings.client_file) in err)


def test_existing_token(settings, capsys):
    settings.client_file.write_text("{}")
    settings.token_file.write_text("{}")
    assert(auth.authorize(settings) == 0)
    assert("Token already exists at:" in capsys.readouterr().out)


def test_authorize_writes_token(settings, capsys, monkeypatch):
    settings.client_file.write_text("{}")
    flow = MagicMock()
    flow.run_local_server.return_value = fake_creds()
    factory = MagicMock()
    factory.from_client_secrets_file.return_value = flow
    monkeypatch.setattr(auth, "InstalledAppFlow", factory)

    assert(auth.authorize(settings) == 0)
    factory.from_client_secrets_file.assert_called_with(str(settings.client_file), scopes=DEFAULT_SCOPES)
    kwargs = flow.run_local_server.call_args.kwargs
    assert(kwargs['port'] == 3000)
    assert(kwargs['access_type'] == "offline")
    assert(kwargs['prompt'] == "consent")
    with open(settings.token_file, 'r', encoding='utf-8') as f:
        token = json.load(f)
    assert(token['refresh_token'] == "1//refresh")
    assert(token['expiry_date'] == 1705305600000)
    out = capsys.readouterr().out
    assert("Authorization successful!" in out)
    assert(f"Token saved to: {settings.token_file}" in out)
