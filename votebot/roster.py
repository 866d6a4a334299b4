"""Roster cache: persists the team's users and the team's display name.

Every write is independent and best-effort: a failure is logged and never
aborts the session or touches other roster rows.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from votebot.models import Member, Team

logger = logging.getLogger("votebot.roster")


class RosterCache:
    """Roster rows for one team, refreshed from Slack user/team payloads."""

    def __init__(self, team_id: str, log: logging.LoggerAdapter | logging.Logger | None = None) -> None:
        self.team_id = team_id
        self.log = log or logger

    def update_user(self, user: dict) -> bool:
        """Upsert one Slack user object (``{"id", "name", "is_bot", ...}``)."""
        user_id = user.get("id", "")
        if not user_id:
            self.log.warning("Ignoring user payload without an id")
            return False
        try:
            with transaction.atomic():
                Member.objects.bulk_create(
                    [Member(
                        team_id=self.team_id,
                        user_id=user_id,
                        name=user.get("name", ""),
                        is_bot=bool(user.get("is_bot", False)),
                    )],
                    update_conflicts=True,
                    unique_fields=["team", "user_id"],
                    update_fields=["name", "is_bot"],
                )
        except DatabaseError:
            self.log.exception("Failed to refresh user %s in db", user_id)
            return False
        return True

    def sync(self, users) -> int:
        """Upsert a full roster snapshot; returns how many rows were written."""
        return sum(1 for user in users if self.update_user(user))

    def update_team(self, team: dict) -> bool:
        """Store the team's current display name (``{"id", "name", ...}``)."""
        team_id = team.get("id") or self.team_id
        name = team.get("name")
        if not name:
            return False
        try:
            with transaction.atomic():
                Team.objects.filter(team_id=team_id).update(name=name)
        except DatabaseError:
            self.log.exception("Failed to refresh team %s in db", team_id)
            return False
        return True

    def is_bot(self, user_id: str) -> bool | None:
        """Return whether ``user_id`` is a bot, or ``None`` if it is unknown."""
        return (
            Member.objects.filter(team_id=self.team_id, user_id=user_id)
            .values_list("is_bot", flat=True)
            .first()
        )
