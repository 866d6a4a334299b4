"""Team management: registering a Slack team with the bot.

``Manager`` has two variants: ``LocalManager`` talks to Slack and the
database directly, ``RemoteManager`` forwards the call over HTTP to a
votebot instance that runs ``LocalManager``. ``get_manager()`` picks one
from settings.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
from django.conf import settings
from django.db import DatabaseError, transaction
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from votebot.models import Team

logger = logging.getLogger("votebot.manager")

ADD_TEAM_PATH = "/api/manage/teams/"


class ManagementError(Exception):
    """Raised when a management operation fails; the message is user-facing."""


@dataclass(frozen=True)
class AddTeamRequest:
    auth_token: str


@dataclass(frozen=True)
class AddTeamResponse:
    team_id: str
    name: str
    url: str
    username: str


class Manager(ABC):
    @abstractmethod
    def add_team(self, request: AddTeamRequest) -> AddTeamResponse:
        """Verify a bot token with Slack and store (or refresh) its team."""


class LocalManager(Manager):
    def __init__(self, client_factory=None) -> None:
        self.client_factory = client_factory or WebClient

    def add_team(self, request: AddTeamRequest) -> AddTeamResponse:
        client = self.client_factory(token=request.auth_token)
        try:
            auth = client.auth_test()
        except SlackApiError as exc:
            raise ManagementError(f"Slack rejected the token: {exc.response.get('error')}") from exc

        team_id = auth.get("team_id", "")
        if not team_id:
            raise ManagementError("Slack did not return a team id")

        try:
            with transaction.atomic():
                Team.objects.bulk_create(
                    [Team(team_id=team_id, name=auth.get("team", ""), auth_token=request.auth_token)],
                    update_conflicts=True,
                    unique_fields=["team_id"],
                    update_fields=["name", "auth_token"],
                )
        except DatabaseError as exc:
            logger.exception("Failed to store team %s", team_id)
            raise ManagementError(f"Failed to store team: {exc}") from exc

        logger.info("Registered team %s (%s) as %s", auth.get("team"), team_id, auth.get("user"))
        return AddTeamResponse(
            team_id=team_id,
            name=auth.get("team", ""),
            url=auth.get("url", ""),
            username=auth.get("user", ""),
        )


class RemoteManager(Manager):
    def __init__(self, base_url: str, key: str = "", transport: httpx.BaseTransport | None = None) -> None:
        self.base_url = base_url
        self.client = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bearer {key}"},
            timeout=10,
            transport=transport,
        )

    def add_team(self, request: AddTeamRequest) -> AddTeamResponse:
        try:
            response = self.client.post(ADD_TEAM_PATH, json={"auth_token": request.auth_token})
        except httpx.HTTPError as exc:
            raise ManagementError(f"Could not reach the manager at {self.base_url}: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code != 200:
            detail = data.get("error") or response.text
            raise ManagementError(f"Manager returned HTTP {response.status_code}: {detail}")

        team = data.get("team") or {}
        return AddTeamResponse(
            team_id=team.get("team_id", ""),
            name=team.get("name", ""),
            url=team.get("url", ""),
            username=team.get("username", ""),
        )


def get_manager() -> Manager:
    """Return the manager configured for this process."""
    if settings.VOTEBOT_MANAGER_URL:
        return RemoteManager(settings.VOTEBOT_MANAGER_URL, settings.VOTEBOT_MANAGER_KEY)
    return LocalManager()
