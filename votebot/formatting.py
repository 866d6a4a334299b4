"""Plain-text reply formatting for chat messages."""

from __future__ import annotations

from decimal import Decimal

from votebot.grammar import VOTE_QUANTUM

HELP_TEXT = (
    "Here's what I understand:\n"
    "- `propose <topic>: <comment>` opens voting on a topic in this channel\n"
    "- `+1 on <topic>: <comment>` casts (or replaces) your vote; any signed number works\n"
    "- `@votebot status` summarises the open topics in this channel\n"
    "- `@votebot status <topic>` lists the votes on one topic\n"
    "- `@votebot close <topic>` / `@votebot reopen <topic>` ends or resumes voting\n"
    "- `@votebot howdy` says hello"
)


def format_value(value: Decimal) -> str:
    """Render a vote value or total with exactly two decimal places."""
    return str(Decimal(value).quantize(VOTE_QUANTUM))


def format_signed_value(value: Decimal) -> str:
    text = format_value(value)
    return text if text.startswith("-") else f"+{text}"


def mention(user_id: str) -> str:
    return f"<@{user_id}>:"


def format_voting_open(topic: str) -> str:
    return f"Voting is now open on {topic}"


def format_voting_closed(topic: str) -> str:
    return f"Voting is now closed on {topic}"


def format_vote_rejected(user_id: str, topic: str) -> str:
    return f"{mention(user_id)} Voting is closed on {topic}"


def format_no_topic(topic: str) -> str:
    return f"No topic named {topic}"


def format_summary(topics) -> str:
    """Render the open-topic summary for a channel.

    Args:
        topics: ``TopicSummary`` rows, already ordered.
    """
    if not topics:
        return "No open topics"
    lines = ["Vote summary"]
    for topic in topics:
        lines.append(
            f"* {topic.name} -- {format_value(topic.total)} "
            f"({topic.votes} votes) | {topic.comment}"
        )
    return "\n".join(lines)


def format_topic_detail(topic, votes) -> str:
    """Render every vote on one topic followed by the running total."""
    header = f"Votes on {topic.name}"
    if topic.comment:
        header += f" | {topic.comment}"
    if not topic.is_open:
        header += " (closed)"
    lines = [header]
    total = Decimal(0)
    for vote in votes:
        total += vote.value
        line = f"* <@{vote.user_id}> {format_signed_value(vote.value)}"
        if vote.comment:
            line += f" | {vote.comment}"
        lines.append(line)
    lines.append(f"Total: {format_value(total)} ({len(votes)} votes)")
    return "\n".join(lines)


def format_greeting(user_id: str) -> str:
    return f"{mention(user_id)} Howdy neighbor!"


def format_syntax_error(user_id: str, error: Exception | str) -> str:
    return f"{mention(user_id)} Syntax error: {error}"


def format_unrecognized(user_id: str, verb: str, args: list[str]) -> str:
    return f"{mention(user_id)} You seem confused; you said `{[verb, *args]!r}`"


def format_help(user_id: str) -> str:
    return f"{mention(user_id)} {HELP_TEXT}"
