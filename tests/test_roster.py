"""Tests for roster and team metadata upkeep."""

from unittest import mock

from django.db import DatabaseError

from votebot.models import Member, Team
from votebot.roster import RosterCache


def test_update_user_upserts(team):
    roster = RosterCache(team.team_id)

    assert roster.update_user({"id": "U1", "name": "alice", "is_bot": False})
    assert roster.update_user({"id": "U1", "name": "alice2", "is_bot": True})

    member = Member.objects.get(team=team, user_id="U1")
    assert (member.name, member.is_bot) == ("alice2", True)
    assert Member.objects.count() == 1


def test_sync_counts_written_rows(team):
    roster = RosterCache(team.team_id)

    written = roster.sync([{"id": "U1", "name": "alice"}, {"name": "no id"}, {"id": "B1", "is_bot": True}])

    assert written == 2
    assert roster.is_bot("B1") is True
    assert roster.is_bot("U1") is False


def test_unknown_user_is_none(team):
    assert RosterCache(team.team_id).is_bot("U404") is None


def test_update_user_failure_is_logged_not_raised(team, caplog):
    roster = RosterCache(team.team_id)
    with mock.patch.object(Member.objects, "bulk_create", side_effect=DatabaseError("boom")):
        assert roster.update_user({"id": "U1", "name": "alice"}) is False

    assert "Failed to refresh user U1" in caplog.text
    assert roster.update_user({"id": "U2", "name": "bob"})


def test_update_team_renames(team):
    assert RosterCache(team.team_id).update_team({"id": "T1", "name": "Acme Corp"})
    team.refresh_from_db()
    assert team.name == "Acme Corp"


def test_update_team_without_name_is_skipped(team):
    assert RosterCache(team.team_id).update_team({"id": "T1"}) is False
    assert Team.objects.get(team_id="T1").name == "Old Acme"
