"""Directed-command registry: maps verbs addressed to the bot to handlers.

Each handler takes the team's ledger, the command arguments, the author's
user id and the channel, and returns the reply texts to post there.
"""

from __future__ import annotations

import logging

from votebot.formatting import (
    format_greeting,
    format_help,
    format_no_topic,
    format_summary,
    format_syntax_error,
    format_topic_detail,
    format_unrecognized,
    format_voting_closed,
    format_voting_open,
)
from votebot.ledger import TopicNotFound, VoteLedger

logger = logging.getLogger("votebot.handlers")


def handle_howdy(ledger: VoteLedger, args: list[str], user_id: str, channel: str) -> list[str]:
    return [format_greeting(user_id)]


def handle_help(ledger: VoteLedger, args: list[str], user_id: str, channel: str) -> list[str]:
    return [format_help(user_id)]


def handle_status(ledger: VoteLedger, args: list[str], user_id: str, channel: str) -> list[str]:
    if not args:
        return [format_summary(ledger.status(channel))]
    try:
        topic, votes = ledger.topic_detail(args[0])
    except TopicNotFound as exc:
        return [format_no_topic(exc.name)]
    return [format_topic_detail(topic, votes)]


def _set_open(ledger: VoteLedger, args: list[str], user_id: str, is_open: bool) -> list[str]:
    if len(args) != 1:
        verb = "reopen" if is_open else "close"
        return [format_syntax_error(user_id, f"usage: {verb} <topic>")]
    try:
        ledger.set_open(args[0], is_open)
    except TopicNotFound as exc:
        return [format_no_topic(exc.name)]
    return [format_voting_open(args[0]) if is_open else format_voting_closed(args[0])]


def handle_close(ledger: VoteLedger, args: list[str], user_id: str, channel: str) -> list[str]:
    return _set_open(ledger, args, user_id, is_open=False)


def handle_reopen(ledger: VoteLedger, args: list[str], user_id: str, channel: str) -> list[str]:
    return _set_open(ledger, args, user_id, is_open=True)


HANDLER_REGISTRY: dict[str, callable] = {
    "howdy": handle_howdy,
    "help": handle_help,
    "status": handle_status,
    "close": handle_close,
    "reopen": handle_reopen,
}


def run_directed(ledger: VoteLedger, verb: str, args: list[str], user_id: str, channel: str) -> list[str]:
    """Dispatch a directed command, echoing verbs nobody handles."""
    handler = HANDLER_REGISTRY.get(verb.lower())
    if handler is None:
        logger.debug("Unrecognized directed verb %r", verb)
        return [format_unrecognized(user_id, verb, args)]
    return handler(ledger, args, user_id, channel)
