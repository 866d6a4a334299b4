"""Command grammar: turns one chat message into a typed command.

Patterns are tried in a fixed order: proposal, then vote, then (only for
messages addressed to the bot) a shell-tokenized directed command.
"""

from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from votebot.models import VOTE_DECIMAL_PLACES, VOTE_MAX_DIGITS

logger = logging.getLogger("votebot.grammar")

TOPIC_NAME = r"[-a-zA-Z0-9_]+"

PROPOSAL_RE = re.compile(rf"^propose\s+({TOPIC_NAME})(?:\s*[:;,] *(.*))?")
VOTE_RE = re.compile(
    rf"^\s*([-+](?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)) on ({TOPIC_NAME})(?: *[;:,] *(.*))?"
)

VOTE_QUANTUM = Decimal(1).scaleb(-VOTE_DECIMAL_PLACES)


class CommandSyntaxError(Exception):
    """Raised when a message addressed to the bot cannot be tokenized."""


@dataclass(frozen=True)
class ProposeTopic:
    name: str
    comment: str | None = None


@dataclass(frozen=True)
class CastVote:
    value: Decimal
    topic_name: str
    comment: str | None = None


@dataclass(frozen=True)
class DirectedCommand:
    verb: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NoMatch:
    pass


Command = ProposeTopic | CastVote | DirectedCommand | NoMatch

NO_MATCH = NoMatch()


def _optional(text: str | None) -> str | None:
    """Empty comments are stored as absent."""
    if text is None:
        return None
    text = text.strip()
    return text or None


def parse_vote_value(raw: str) -> Decimal:
    """Parse a signed vote literal into an exact two-place decimal.

    Raises:
        InvalidOperation: If ``raw`` is not a decimal or does not fit the
            vote column.
    """
    value = Decimal(raw).quantize(VOTE_QUANTUM, rounding=ROUND_HALF_EVEN)
    if value and value.adjusted() >= VOTE_MAX_DIGITS - VOTE_DECIMAL_PLACES:
        raise InvalidOperation(f"vote value {raw!r} out of range")
    return value


def addressed_pattern(bot_user_id: str, bot_name: str = "") -> re.Pattern:
    """Build the regex matching messages addressed to the bot.

    A message is addressed when it starts with a mention (``<@U123>`` with
    an optional colon) or with the bot's name followed by ``:`` or a space.
    """
    prefixes = [rf"<@{re.escape(bot_user_id)}>:?\s*"]
    if bot_name:
        prefixes.append(rf"{re.escape(bot_name)}:?\s+")
    return re.compile(rf"^(?:{'|'.join(prefixes)})(.*)", re.DOTALL)


class CommandGrammar:
    """Classifies message text for a single bot identity."""

    def __init__(self, bot_user_id: str = "", bot_name: str = "") -> None:
        self.bot_user_id = bot_user_id
        self.bot_name = bot_name
        self._addressed = addressed_pattern(bot_user_id, bot_name) if bot_user_id else None

    def classify(self, text: str, log: logging.LoggerAdapter | logging.Logger | None = None) -> Command:
        """Return the command ``text`` expresses, or ``NO_MATCH``.

        Raises:
            CommandSyntaxError: If the message is addressed to the bot but
                holds no parseable command.
        """
        log = log or logger
        text = text or ""

        match = PROPOSAL_RE.match(text)
        if match:
            return ProposeTopic(name=match.group(1), comment=_optional(match.group(2)))

        match = VOTE_RE.match(text)
        if match:
            try:
                value = parse_vote_value(match.group(1))
            except InvalidOperation as exc:
                log.info("Failed to parse vote value %r: %s", match.group(1), exc)
                return NO_MATCH
            return CastVote(value=value, topic_name=match.group(2), comment=_optional(match.group(3)))

        if self._addressed is None:
            return NO_MATCH
        match = self._addressed.match(text)
        if not match:
            return NO_MATCH
        return parse_directed(match.group(1))


def parse_directed(text: str) -> DirectedCommand:
    """Split the body of an addressed message into verb and arguments."""
    try:
        args = shlex.split(text)
    except ValueError as exc:
        raise CommandSyntaxError(str(exc)) from exc
    if not args:
        raise CommandSyntaxError("no command given")
    return DirectedCommand(verb=args[0], args=args[1:])
