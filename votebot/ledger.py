"""Vote ledger: applies proposals and votes to the database and answers
status queries.

Mutations are store-level upserts (``INSERT ... ON CONFLICT DO UPDATE``),
so two writers racing on the same key are resolved by the database rather
than by application locking. Each mutating method joins the caller's
transaction when there is one and opens its own otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum

from votebot.grammar import VOTE_QUANTUM
from votebot.models import Topic, Vote

logger = logging.getLogger("votebot.ledger")


class TopicNotFound(Exception):
    """Raised when a command names a topic that was never proposed."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No topic named {name}")


class TopicClosed(Exception):
    """Raised when a vote targets a topic whose voting has been closed."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Voting is closed on {name}")


@dataclass(frozen=True)
class TopicSummary:
    name: str
    comment: str
    votes: int
    total: Decimal


@dataclass(frozen=True)
class VoteLine:
    user_id: str
    value: Decimal
    comment: str | None


class VoteLedger:
    """Topic and vote storage for a single team."""

    def __init__(self, team_id: str, log: logging.LoggerAdapter | logging.Logger | None = None) -> None:
        self.team_id = team_id
        self.log = log or logger

    @transaction.atomic(savepoint=False)
    def propose(self, channel: str, name: str, comment: str | None = None) -> None:
        """Create the topic, or move an existing one to ``channel`` and reopen it."""
        Topic.objects.bulk_create(
            [Topic(team_id=self.team_id, channel=channel, name=name, comment=comment or None, is_open=True)],
            update_conflicts=True,
            unique_fields=["team", "name"],
            update_fields=["channel", "comment", "is_open"],
        )
        self.log.info("Saw proposal %s", name)

    def cast_vote(self, user_id: str, topic_name: str, value: Decimal, comment: str | None = None) -> None:
        """Record ``user_id``'s vote, replacing any earlier vote on the topic.

        Names that were never proposed are accepted.

        Raises:
            TopicClosed: If the topic exists and voting on it is closed.
        """
        if Topic.objects.filter(team_id=self.team_id, name=topic_name, is_open=False).exists():
            raise TopicClosed(topic_name)
        with transaction.atomic(savepoint=False):
            Vote.objects.bulk_create(
                [Vote(
                    team_id=self.team_id,
                    topic_name=topic_name,
                    user_id=user_id,
                    value=value,
                    comment=comment or None,
                )],
                update_conflicts=True,
                unique_fields=["team", "topic_name", "user_id"],
                update_fields=["value", "comment"],
            )
        self.log.info("Saw vote %s on %s", value, topic_name)

    def set_open(self, name: str, is_open: bool) -> None:
        """Close or reopen voting on a topic.

        Raises:
            TopicNotFound: If the team has no topic called ``name``.
        """
        updated = Topic.objects.filter(team_id=self.team_id, name=name).update(is_open=is_open)
        if not updated:
            raise TopicNotFound(name)
        self.log.info("Topic %s %s", name, "reopened" if is_open else "closed")

    def status(self, channel: str) -> list[TopicSummary]:
        """Summarise every open topic in ``channel``, ordered by name."""
        topics = list(
            Topic.objects.filter(team_id=self.team_id, channel=channel, is_open=True)
            .order_by("name")
            .values_list("name", "comment")
        )
        tallies = {
            row["topic_name"]: row
            for row in Vote.objects.filter(
                team_id=self.team_id, topic_name__in=[name for name, _ in topics],
            )
            .values("topic_name")
            .annotate(count=Count("id"), total=Sum("value"))
            .order_by()
        }
        summaries = []
        for name, comment in topics:
            tally = tallies.get(name) or {}
            total = tally.get("total") or Decimal(0)
            summaries.append(TopicSummary(
                name=name,
                comment=comment or "",
                votes=tally.get("count", 0),
                total=Decimal(total).quantize(VOTE_QUANTUM),
            ))
        return summaries

    def topic_detail(self, name: str) -> tuple[Topic, list[VoteLine]]:
        """Return a topic and its votes.

        Raises:
            TopicNotFound: If the team has no topic called ``name``.
        """
        try:
            topic = Topic.objects.get(team_id=self.team_id, name=name)
        except Topic.DoesNotExist:
            raise TopicNotFound(name)
        votes = [
            VoteLine(user_id=user_id, value=value, comment=comment)
            for user_id, value, comment in Vote.objects.filter(team_id=self.team_id, topic_name=name)
            .order_by("user_id")
            .values_list("user_id", "value", "comment")
        ]
        return topic, votes
