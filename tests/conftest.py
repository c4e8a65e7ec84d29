import datetime
import json
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from gwscli.config import Settings

BANGKOK = ZoneInfo("Asia/Bangkok")

# a monday
NOW = datetime.datetime(2024, 1, 15, 10, 0, tzinfo=BANGKOK)


class FakeAccess():
    """
    Stands in for GWSAccess, one MagicMock per service name so tests
    can set up return values and check the calls made.
    """

    def __init__(self) -> None:
        self.services = {}

    def get_service(self, name: str, version: str) -> MagicMock:
        if name not in self.services:
            self.services[name] = MagicMock(name=f"{name}:{version}")
        return self.services[name]

    def __getattr__(self, name: str) -> MagicMock:
        if name in ["calendar", "docs", "drive", "gmail", "sheets", "slides"]:
            return self.get_service(name, "")
        raise AttributeError(name)


@pytest.fixture
def settings(tmp_path):
    return Settings(credentials_dir=tmp_path, timezone="Asia/Bangkok")


@pytest.fixture
def access():
    return FakeAccess()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def run(settings, access, clock):
    """Run a tool's CommandSet against the fakes, returns the exit code"""
    def runner(commands, *argv):
        return commands.run(list(argv), settings=settings, access=access, clock=clock)
    return runner


@pytest.fixture
def gmail_config(settings):
    """Write a gmail config file, returns its path"""
    def writer(**kwargs):
        with open(settings.gmail_config_file, 'w', encoding='utf-8') as f:
            json.dump(kwargs, f)
        return settings.gmail_config_file
    return writer
