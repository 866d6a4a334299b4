"""Tests for the management HTTP API."""

from unittest import mock

import pytest
from rest_framework.test import APIClient

from votebot.manager import AddTeamResponse, ManagementError

URL = "/api/manage/teams/"


@pytest.fixture
def client():
    return APIClient()


def test_health_check(client):
    response = client.get("/api/health/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_add_team(client, db):
    with mock.patch("votebot.views.LocalManager") as manager_cls:
        manager_cls.return_value.add_team.return_value = AddTeamResponse(
            "T1", "Acme", "https://acme.slack.com/", "votebot",
        )
        response = client.post(
            URL, {"auth_token": "xoxb-1"}, format="json", HTTP_AUTHORIZATION="Bearer test-manager-key",
        )

    assert response.status_code == 200
    assert response.json() == {"team": {
        "team_id": "T1", "name": "Acme", "url": "https://acme.slack.com/", "username": "votebot",
    }}
    assert manager_cls.return_value.add_team.call_args.args[0].auth_token == "xoxb-1"


def test_add_team_requires_key(client):
    response = client.post(URL, {"auth_token": "xoxb-1"}, format="json", HTTP_AUTHORIZATION="Bearer nope")
    assert response.status_code == 401


def test_add_team_requires_token(client):
    response = client.post(URL, {}, format="json", HTTP_AUTHORIZATION="Bearer test-manager-key")
    assert response.status_code == 400
    assert response.json() == {"error": "auth_token is required"}


def test_add_team_reports_manager_errors(client):
    with mock.patch("votebot.views.LocalManager") as manager_cls:
        manager_cls.return_value.add_team.side_effect = ManagementError("Slack rejected the token: invalid_auth")
        response = client.post(
            URL, {"auth_token": "xoxb-bad"}, format="json", HTTP_AUTHORIZATION="Bearer test-manager-key",
        )

    assert response.status_code == 400
    assert response.json() == {"error": "Slack rejected the token: invalid_auth"}


def test_disabled_without_key(client, settings):
    settings.VOTEBOT_MANAGER_KEY = ""
    response = client.post(URL, {"auth_token": "xoxb-1"}, format="json")
    assert response.status_code == 404
