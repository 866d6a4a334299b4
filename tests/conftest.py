"""Shared fixtures: a registered team and a session wired to a fake Slack client."""

from unittest.mock import MagicMock

import pytest

from votebot.models import Team
from votebot.session import SlackSession

AUTH_TEST = {
    "ok": True,
    "url": "https://acme.slack.com/",
    "team": "Acme",
    "user": "votebot",
    "team_id": "T1",
    "user_id": "UBOT",
}

ROSTER = [
    {"id": "U1", "name": "alice", "is_bot": False},
    {"id": "U2", "name": "bob", "is_bot": False},
    {"id": "B1", "name": "robo", "is_bot": True},
]


@pytest.fixture
def web_client():
    client = MagicMock()
    client.auth_test.return_value = dict(AUTH_TEST)
    client.users_list.return_value = [{"ok": True, "members": ROSTER}]
    return client


@pytest.fixture
def team(db):
    return Team.objects.create(team_id="T1", name="Old Acme", auth_token="xoxb-acme")


@pytest.fixture
def session(team, web_client):
    s = SlackSession(team.team_id, team.auth_token, web_client=web_client)
    assert s.connect()
    return s


@pytest.fixture
def message():
    def _message(text, user="U1", channel="C1", **extra):
        return {"type": "message", "text": text, "user": user, "channel": channel, **extra}
    return _message
