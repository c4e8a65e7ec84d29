"""
gws-authorize: the one time OAuth consent that writes the token file the
other tools read.

Runs the installed app flow on localhost:3000, asking for offline access
with a consent prompt so a refresh token always comes back.
"""
from pathlib import Path
import calendar
import json
import sys

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from loguru import logger

from .access import DEFAULT_SCOPES
from .config import Settings
from .log import setup_logging

REDIRECT_PORT = 3000

SUCCESS_MESSAGE = "Authorization Successful! You can close this window and return to the terminal."


def missing_client_message(client_file: Path) -> str:
    return "\n".join(["Error: OAuth client credentials not found!",
                      "",
                      "Please download your OAuth 2.0 Client ID from Google Cloud Console",
                      "and save it as:",
                      f"  {client_file}",
                      "",
                      "Steps:",
                      "1. Go to https://console.cloud.google.com",
                      "2. APIs & Services > Credentials",
                      "3. Create OAuth 2.0 Client ID (Desktop app)",
                      "4. Download JSON and save to the path above"])


def token_to_dict(creds: Credentials) -> dict:
    """
    The token file format: the access token, refresh token, space
    separated scopes and the expiry as epoch milliseconds.
    """
    d = {'access_token': creds.token,
         'refresh_token': creds.refresh_token,
         'scope': " ".join(creds.scopes or []),
         'token_type': "Bearer"}
    if creds.expiry is not None:
        # google-auth keeps expiry as naive UTC
        d['expiry_date'] = calendar.timegm(creds.expiry.timetuple()) * 1000
    return d


def write_token(creds: Credentials, token_file: Path) -> None:
    token_file.parent.mkdir(parents=True, exist_ok=True)
    with open(token_file, 'w', encoding='utf-8') as f:
        json.dump(token_to_dict(creds), f, indent=2)
    logger.debug(f"token written to {token_file}")


def authorize(settings: Settings) -> int:
    if not settings.client_file.is_file():
        print(missing_client_message(settings.client_file), file=sys.stderr)
        return 1
    if settings.token_file.exists():
        print(f"Token already exists at: {settings.token_file}")
        print("Delete it first if you want to re-authorize.")
        return 0

    flow = InstalledAppFlow.from_client_secrets_file(str(settings.client_file), scopes=DEFAULT_SCOPES)
    print("Opening browser for authorization...")
    creds = flow.run_local_server(port=REDIRECT_PORT,
                                  authorization_prompt_message="If browser doesn't open, visit this URL:\n{url}\n",
                                  success_message=SUCCESS_MESSAGE,
                                  access_type="offline",
                                  prompt="consent")
    write_token(creds, settings.token_file)
    print("Authorization successful!")
    print(f"Token saved to: {settings.token_file}")
    print("")
    print("You can now use: gcal, gdocs, gdrive, gmail, gsheet, gslides")
    return 0


def main() -> None:
    settings = Settings()
    setup_logging("DEBUG" if "--verbose" in sys.argv[1:] else settings.log_level)
    sys.exit(authorize(settings))
