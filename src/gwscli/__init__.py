"""
Command line wrappers around the Google Work Space Python client.
Six tools (gcal, gdocs, gdrive, gmail, gsheet, gslides) each map a subcommand
and a handful of --flags to one or a few API calls and print the result.
gws-authorize does the one time OAuth dance that produces the token file
the other tools read.

The pieces with actual logic live outside the commands so they can be
tested without a network: flag parsing, natural language dates, A1 range
resolution and the gmail placeholder guard.
"""

__version__ = "0.1.0"
