"""Tests for the connect and daemon management commands."""

import logging
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from votebot.manager import AddTeamResponse, ManagementError


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_connect_prints_team_and_user():
    manager = mock.Mock()
    manager.add_team.return_value = AddTeamResponse("T1", "Acme", "https://acme.slack.com/", "votebot")
    out = StringIO()

    with mock.patch("votebot.management.commands.connect.get_manager", return_value=manager):
        call_command("connect", "xoxb-1", stdout=out)

    assert "Connected to team Acme as votebot" in out.getvalue()
    assert manager.add_team.call_args.args[0].auth_token == "xoxb-1"


def test_connect_reports_errors():
    manager = mock.Mock()
    manager.add_team.side_effect = ManagementError("Slack rejected the token: invalid_auth")

    with mock.patch("votebot.management.commands.connect.get_manager", return_value=manager):
        with pytest.raises(CommandError, match="Error: Slack rejected the token"):
            call_command("connect", "xoxb-bad")


def test_daemon_runs_supervisor(restore_root_logging):
    with mock.patch("votebot.management.commands.daemon.SessionSupervisor") as supervisor_cls:
        call_command("daemon")

    supervisor_cls.return_value.run.assert_called_once_with()
    assert any(getattr(h, "votebot_console", False) for h in restore_root_logging.handlers)


def test_connect_logs_to_console(restore_root_logging):
    manager = mock.Mock()
    manager.add_team.return_value = AddTeamResponse("T1", "Acme", "", "votebot")

    with mock.patch("votebot.management.commands.connect.get_manager", return_value=manager):
        call_command("connect", "xoxb-1", stdout=StringIO())

    consoles = [h for h in restore_root_logging.handlers if getattr(h, "votebot_console", False)]
    assert len(consoles) == 1
