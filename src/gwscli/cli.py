"""
Shared plumbing for the six command line tools.

Each tool builds a CommandSet, registers its handlers with the command()
decorator and hands sys.argv to main().  A handler receives a Context
(settings, lazily authenticated access, clock) and the parsed flags with
the subcommand already stripped from the positionals.
"""
from dataclasses import dataclass, field
from typing import Callable
import datetime
import sys

from googleapiclient.errors import HttpError
from googleapiclient.discovery import Resource
from loguru import logger

from .access import GWSAccess
from .config import Settings, GmailConfig
from .flags import Flags, parse_flags
from .log import setup_logging


class UsageError(ValueError):
    """
    Required flags missing or malformed.  The message is the usage line
    for the command; it is printed and the tool exits cleanly.
    """


def require(value, usage: str):
    """value if it's something, UsageError with the usage line otherwise"""
    if value is None or value is True or value == "":
        raise UsageError(usage)
    return value


@dataclass
class Context():
    """
    Everything a handler needs for one invocation.
    Nothing here touches the network or the credential files until a
    service is actually asked for.
    """
    settings: Settings
    access: GWSAccess
    clock: Callable[[], datetime.datetime]|None = field(default=None)
    _gmail_config: GmailConfig|None = field(default=None, repr=False)

    def now(self) -> datetime.datetime:
        if self.clock is not None:
            return self.clock()
        return datetime.datetime.now(self.settings.tz)

    @property
    def tz(self):
        return self.settings.tz

    @property
    def gmail_config(self) -> GmailConfig:
        if self._gmail_config is None:
            self._gmail_config = GmailConfig.load(self.settings.gmail_config_file)
        return self._gmail_config

    def service(self, name: str, version: str) -> Resource:
        return self.access.get_service(name, version)

    def calendar(self) -> Resource:
        return self.service("calendar", "v3")

    def docs(self) -> Resource:
        return self.service("docs", "v1")

    def drive(self) -> Resource:
        return self.service("drive", "v3")

    def gmail(self) -> Resource:
        return self.service("gmail", "v1")

    def sheets(self) -> Resource:
        return self.service("sheets", "v4")

    def slides(self) -> Resource:
        return self.service("slides", "v1")


Handler = Callable[[Context, Flags], int|None]


class CommandSet():
    """
    Name -> handler table for one tool, aliases included.
    """

    def __init__(self, prog: str, usage: str) -> None:
        self.prog = prog
        self.usage = usage
        self.handlers: dict[str, Handler] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.handlers

    def command(self, *names: str) -> Callable[[Handler], Handler]:
        """
        Register the decorated function under every name given,
        the first being the canonical one.
        """
        def register(fn: Handler) -> Handler:
            for n in names:
                if n in self.handlers:
                    raise RuntimeError(f"{self.prog}: command '{n}' registered twice")
                self.handlers[n] = fn
            return fn
        return register

    def print_usage(self) -> None:
        print(self.usage.strip("\n"))

    def run(self, argv: list[str],
            settings: Settings|None = None,
            access: GWSAccess|None = None,
            clock: Callable[[], datetime.datetime]|None = None) -> int:
        """
        Dispatch one invocation and return the process exit code.
        access and clock are only passed in by tests.
        """
        flags = parse_flags(argv)
        s = settings if settings is not None else Settings()
        setup_logging("DEBUG" if flags.flag("verbose") else s.log_level)

        name = flags.positional(0)
        if not name or name == "help" or (flags.flag("help") and name not in self.handlers):
            self.print_usage()
            return 0
        handler = self.handlers.get(name)
        if handler is None:
            print(f"Unknown command: {name}")
            print(f"Run '{self.prog} help' for usage.")
            return 0

        args = Flags(values=dict(flags.values), positionals=flags.positionals[1:])
        ctx = Context(settings=s, access=access if access is not None else GWSAccess(s), clock=clock)
        logger.debug(f"{self.prog} {name} {args.as_dict()}")
        try:
            rc = handler(ctx, args)
        except UsageError as e:
            if str(e):
                print(str(e))
            else:
                self.print_usage()
            return 0
        except HttpError as e:
            logger.opt(exception=e).debug(f"{self.prog} {name} failed")
            reason = getattr(e, "reason", None) or str(e)
            print(f"Error: {reason}", file=sys.stderr)
            return 1
        except Exception as e:
            logger.opt(exception=e).debug(f"{self.prog} {name} failed")
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return rc if isinstance(rc, int) else 0

    def main(self, argv: list[str]|None = None) -> None:
        sys.exit(self.run(sys.argv[1:] if argv is None else argv))
