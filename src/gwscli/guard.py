"""
Last line of defence before mail leaves: catch template text that was
never filled in, and append the configured signature.
"""
from dataclasses import dataclass, field
from enum import Enum
import re

from loguru import logger

from .config import GmailConfig

PLACEHOLDER_PATTERNS = [
    # [Your Name], [Company], [Insert date]
    re.compile(r"\[(?:your|my|insert|recipient|company|name|first|last|date|title)[^\]\n]{0,40}\]", re.IGNORECASE),
    # {{name}}
    re.compile(r"\{\{[^}\n]+\}\}"),
    # __NAME__
    re.compile(r"__[A-Z][A-Z0-9_]*__"),
    # <<name>>
    re.compile(r"<<[^>\n]+>>"),
    # {FIRST_NAME}
    re.compile(r"(?<!\{)\{[A-Z][A-Z0-9_]*\}(?!\})"),
    # INSERT NAME HERE
    re.compile(r"\bINSERT\b[^\n]{0,40}?\bHERE\b", re.IGNORECASE),
]


class GuardMode(Enum):
    DISABLED = "disabled"
    WARN = "warn"
    BLOCK = "block"

    @staticmethod
    def from_config(config: GmailConfig) -> "GuardMode":
        if config.block_on_placeholders:
            return GuardMode.BLOCK
        if config.warn_on_placeholders:
            return GuardMode.WARN
        return GuardMode.DISABLED


class PlaceholderBlocked(RuntimeError):
    def __init__(self, placeholders: list[str]) -> None:
        self.placeholders = placeholders
        super().__init__(f"Message contains unfilled placeholders: {', '.join(placeholders)}"
                         " (use --force to send anyway)")


@dataclass
class GuardResult():
    mode: GuardMode
    placeholders: list[str] = field(default_factory=list)
    blocked: bool = field(default=False)
    overridden: bool = field(default=False)

    def __bool__(self) -> bool:
        """True when the message may go out"""
        return not self.blocked


def find_placeholders(*texts: str|None) -> list[str]:
    """Distinct placeholder tokens in the order they first appear"""
    found = []
    for t in texts:
        if not t:
            continue
        for p in PLACEHOLDER_PATTERNS:
            for m in p.finditer(t):
                if m.group(0) not in found:
                    found.append(m.group(0))
    return found


def check_outbound(config: GmailConfig, subject: str|None, body: str|None, force: bool = False) -> GuardResult:
    """
    Decide whether a message may be sent.  Never raises, the caller
    decides what a block means (see enforce()).
    """
    mode = GuardMode.from_config(config)
    if mode == GuardMode.DISABLED:
        return GuardResult(mode=mode)
    found = find_placeholders(subject, body)
    result = GuardResult(mode=mode, placeholders=found)
    if found:
        if mode == GuardMode.BLOCK and not force:
            result.blocked = True
        elif mode == GuardMode.BLOCK:
            result.overridden = True
        logger.debug(f"placeholder check: {found} blocked={result.blocked}")
    return result


def enforce(config: GmailConfig, subject: str|None, body: str|None, force: bool = False) -> GuardResult:
    """
    check_outbound() plus the side effects: a warning for anything found,
    PlaceholderBlocked when the message must not go out.
    """
    result = check_outbound(config, subject, body, force)
    if result.placeholders:
        logger.warning(f"possible unfilled placeholders: {', '.join(result.placeholders)}")
    if result.blocked:
        raise PlaceholderBlocked(result.placeholders)
    return result


def apply_signature(body: str, signature: str|None) -> str:
    """Append the signature once, a body that already has it is left alone"""
    if not signature or signature in body:
        return body
    return f"{body}\n\n{signature}"
