"""Data models for teams, roster members, topics, and votes.

Every row is keyed by the Slack team id, so sessions for different teams
never write the same rows.
"""

from django.db import models

VOTE_MAX_DIGITS = 12
VOTE_DECIMAL_PLACES = 2


class Team(models.Model):
    """A connected Slack workspace and the bot token used to reach it."""

    team_id = models.CharField(max_length=32, primary_key=True)
    name = models.CharField(max_length=255, db_column="team_name")
    auth_token = models.CharField(max_length=255, db_column="team_authtoken")

    class Meta:
        db_table = "teams"

    def __str__(self) -> str:
        return f"{self.name} ({self.team_id})"


class Member(models.Model):
    """A Slack user seen in a team's roster."""

    team = models.ForeignKey(
        Team, on_delete=models.CASCADE, db_column="team_id", related_name="members",
    )
    user_id = models.CharField(max_length=32)
    name = models.CharField(max_length=255, db_column="user_name")
    is_bot = models.BooleanField(default=False, db_column="user_is_bot")

    class Meta:
        db_table = "users"
        constraints = [
            models.UniqueConstraint(fields=["team", "user_id"], name="users_team_user_uniq"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.user_id})"


class Topic(models.Model):
    """A named proposal that users in a channel vote on."""

    team = models.ForeignKey(
        Team, on_delete=models.CASCADE, db_column="team_id", related_name="topics",
    )
    channel = models.CharField(max_length=32, db_column="topic_channel")
    name = models.CharField(max_length=255, db_column="topic_name")
    comment = models.TextField(null=True, blank=True, db_column="topic_comment")
    is_open = models.BooleanField(default=True, db_column="topic_open")

    class Meta:
        db_table = "topics"
        constraints = [
            models.UniqueConstraint(fields=["team", "name"], name="topics_team_name_uniq"),
        ]

    def __str__(self) -> str:
        return self.name


class Vote(models.Model):
    """One user's current vote on a topic.

    ``topic_name`` is not a foreign key: a vote may be recorded before its
    topic is proposed and only shows up in summaries once the topic exists.
    """

    team = models.ForeignKey(
        Team, on_delete=models.CASCADE, db_column="team_id", related_name="votes",
    )
    topic_name = models.CharField(max_length=255)
    user_id = models.CharField(max_length=32)
    value = models.DecimalField(
        max_digits=VOTE_MAX_DIGITS, decimal_places=VOTE_DECIMAL_PLACES, db_column="vote_value",
    )
    comment = models.TextField(null=True, blank=True, db_column="vote_comment")

    class Meta:
        db_table = "votes"
        constraints = [
            models.UniqueConstraint(
                fields=["team", "topic_name", "user_id"], name="votes_team_topic_user_uniq",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} {self.value} on {self.topic_name}"
