"""
Authenticated access to Google Work Space for a single CLI invocation.

The OAuth client descriptor and token are provisioned ahead of time
(see gwscli.authorize) and only read here.  Access is an explicitly
constructed object handed to each command rather than a module global,
so tests can swap in a fake that returns mock services.
"""

from pathlib import Path
import datetime
import json

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource
import googleapiclient.discovery_cache as gws_discovery_cache
from loguru import logger

from .config import Settings

TOKEN_URI = "https://oauth2.googleapis.com/token"

SCOPES = {
    "calendar": "https://www.googleapis.com/auth/calendar",
    "sheets": "https://www.googleapis.com/auth/spreadsheets",
    "drive": "https://www.googleapis.com/auth/drive",
    "docs": "https://www.googleapis.com/auth/documents",
    "slides": "https://www.googleapis.com/auth/presentations",
    "gmail-modify": "https://www.googleapis.com/auth/gmail.modify",
    "gmail-send": "https://www.googleapis.com/auth/gmail.send",
    "gmail-ro": "https://www.googleapis.com/auth/gmail.readonly",
}

# everything the tools need, requested in one go by the authorize step
DEFAULT_SCOPES = [SCOPES[s] for s in ["calendar", "sheets", "drive", "docs", "slides",
                                      "gmail-modify", "gmail-send", "gmail-ro"]]


class MissingCredentials(RuntimeError):
    """The OAuth client descriptor or token file is not where we expect it."""


def read_client_config(path: Path) -> dict:
    """
    Load the client descriptor as downloaded from the Cloud Console.
    Desktop apps put everything under 'installed', web apps under 'web'.
    """
    if not (path.exists() and path.is_file()):
        raise MissingCredentials(f"OAuth client credentials not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        j = json.load(f)
    client = j.get('installed') or j.get('web')
    if not client or 'client_id' not in client:
        raise MissingCredentials(f"OAuth client file has no 'installed' or 'web' section: {path}")
    return client


def read_token(path: Path) -> dict:
    if not (path.exists() and path.is_file()):
        raise MissingCredentials(f"OAuth token not found: {path} (run gws-authorize first)")
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def expiry_from_millis(expiry_date: int|float|None) -> datetime.datetime|None:
    """
    The token file stores expiry as epoch milliseconds.
    google-auth wants a naive UTC datetime.
    """
    if not expiry_date:
        return None
    ts = datetime.datetime.fromtimestamp(float(expiry_date) / 1000, tz=datetime.timezone.utc)
    return ts.replace(tzinfo=None, microsecond=0)


def credentials_from_files(client_file: Path, token_file: Path) -> Credentials:
    """
    Build user credentials from the stored client descriptor and token.
    Expiry and refresh are left to google-auth, we never write the token back.
    """
    client = read_client_config(client_file)
    token = read_token(token_file)
    scope = token.get('scope')
    scopes = scope.split() if isinstance(scope, str) else scope
    creds = Credentials(token=token.get('access_token') or token.get('token'),
                        refresh_token=token.get('refresh_token'),
                        token_uri=client.get('token_uri', TOKEN_URI),
                        client_id=client['client_id'],
                        client_secret=client.get('client_secret'),
                        scopes=scopes,
                        expiry=expiry_from_millis(token.get('expiry_date')))
    logger.debug(f"loaded credentials from {token_file} (scopes: {scopes})")
    return creds


class GWSAccess():
    """
    Lazily authenticated access to the Google Work Space services.
    Nothing is read from disk until the first service is requested,
    so 'help' and the like work without any credentials present.
    """

    def __init__(self, settings: Settings|None = None) -> None:
        self.settings = settings if settings is not None else Settings()
        self.reset()

    def __bool__(self) -> bool:
        """True if credentials have been loaded"""
        return self.__creds is not None

    def __str__(self) -> str:
        if self.__creds is not None:
            return f"Loaded:{list(self.__services.keys())}"
        return "Unloaded"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    def reset(self) -> None:
        self.__creds = None
        self.__services = {}
        self.__discovery_cache = gws_discovery_cache.autodetect()

    @property
    def creds(self) -> Credentials:
        """Credentials for this invocation, loaded on first use."""
        if self.__creds is None:
            self.__creds = credentials_from_files(self.settings.client_file, self.settings.token_file)
        return self.__creds

    def get_service(self, name: str, version: str) -> Resource:
        """
        Build the requested service if not already available.
        Raises MissingCredentials if the credential files aren't there.
        """
        id = f'{name}:{version}'
        s = self.__services.get(id, None)
        if s is None:
            logger.debug(f"building service {id}")
            s = build(name, version, credentials=self.creds, cache=self.__discovery_cache)
            self.__services[id] = s
        return s

    def calendar(self) -> Resource:
        return self.get_service("calendar", "v3")

    def docs(self) -> Resource:
        return self.get_service("docs", "v1")

    def drive(self) -> Resource:
        return self.get_service("drive", "v3")

    def gmail(self) -> Resource:
        return self.get_service("gmail", "v1")

    def sheets(self) -> Resource:
        return self.get_service("sheets", "v4")

    def slides(self) -> Resource:
        return self.get_service("slides", "v1")
