"""Per-team Slack session: one RTM connection, one event at a time.

A session starts in ``CONNECTING``; once the bot identity is confirmed and
the team and roster are synced it is ``ACTIVE`` and consumes RTM events
until stopped. A dropped socket is reconnected once; rejected
credentials, at startup or on reconnect, move it straight to
``TERMINATED``; every other per-event failure is logged and the loop
carries on.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass

from django.conf import settings
from django.db import DatabaseError, transaction
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from slack_sdk.rtm_v2 import RTMClient

from votebot.formatting import format_syntax_error, format_vote_rejected, format_voting_open
from votebot.grammar import (
    CastVote,
    CommandGrammar,
    CommandSyntaxError,
    DirectedCommand,
    ProposeTopic,
)
from votebot.handlers import run_directed
from votebot.ledger import TopicClosed, VoteLedger
from votebot.logcontext import context_logger
from votebot.roster import RosterCache

FATAL_AUTH_ERRORS = frozenset({"invalid_auth", "not_authed", "account_inactive", "token_revoked"})

HANDLED_EVENTS = ("message", "user_change", "team_rename", "error")


class SessionState(enum.Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class Reply:
    channel: str
    text: str


def is_fatal_auth_error(exc: SlackApiError) -> bool:
    return (exc.response or {}).get("error") in FATAL_AUTH_ERRORS


class SlackSession:
    """Owns the connection lifecycle for one team."""

    monitor_interval = 1.0

    def __init__(self, team_id: str, token: str, web_client: WebClient | None = None) -> None:
        self.team_id = team_id
        self.token = token
        self.web_client = web_client or WebClient(token=token, timeout=settings.SLACK_API_TIMEOUT)
        self.state = SessionState.CONNECTING
        self.bot_user_id = ""
        self.bot_name = ""
        self.grammar = CommandGrammar()
        self.rtm: RTMClient | None = None
        self._stopped = threading.Event()
        self._bind_log(team=team_id)

    def _bind_log(self, **fields) -> None:
        self.log = context_logger("votebot.session", **fields)
        self.roster = RosterCache(self.team_id, self.log)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> bool:
        """Confirm the bot identity and sync the team and its roster.

        Returns ``False`` (and terminates the session) when Slack rejects
        the token.
        """
        try:
            auth = self.web_client.auth_test()
        except SlackApiError as exc:
            if is_fatal_auth_error(exc):
                self.log.error("Invalid credentials: %s", exc.response.get("error"))
                self.state = SessionState.TERMINATED
                return False
            raise

        self.team_id = auth.get("team_id") or self.team_id
        self.bot_user_id = auth.get("user_id", "")
        self.bot_name = auth.get("user", "")
        self._bind_log(team=auth.get("team", self.team_id), myuser=self.bot_name)
        self.grammar = CommandGrammar(self.bot_user_id, self.bot_name)

        self.roster.update_team({"id": self.team_id, "name": auth.get("team")})
        self._sync_roster()

        self.state = SessionState.ACTIVE
        self.log.info("Connected")
        return True

    def _sync_roster(self) -> None:
        synced = 0
        try:
            for page in self.web_client.users_list(limit=200):
                synced += self.roster.sync(page.get("members", []))
        except SlackApiError as exc:
            self.log.warning("Failed to fetch roster snapshot: %s", exc.response.get("error"))
        self.log.debug("Synced %d roster entries", synced)

    def run(self) -> None:
        """Connect and watch the RTM connection until the session ends.

        A dropped socket is reconnected once per drop. A reconnect that
        Slack refuses ends the session; nothing is retried.
        """
        try:
            if not self.connect():
                return
            self.rtm = self._make_rtm()
            self.rtm.connect()
            self.log.info("RTM session ready")
            while not self._stopped.wait(self.monitor_interval):
                if not self.rtm.is_connected():
                    self.log.warning("RTM connection dropped; reconnecting")
                    self.rtm.connect_to_new_endpoint()
        except SlackApiError as exc:
            if is_fatal_auth_error(exc):
                self.log.error("Invalid credentials: %s", exc.response.get("error"))
            else:
                self.log.exception("Slack connection failed")
        except Exception:
            self.log.exception("RTM connection failed")
        finally:
            self.state = SessionState.TERMINATED
            self._stopped.set()
            if self.rtm is not None:
                self.rtm.close()
            self.log.info("Session terminated")

    def stop(self) -> None:
        """Ask ``run()`` to close the connection and return."""
        self._stopped.set()

    def _make_rtm(self) -> RTMClient:
        # A single worker keeps event handling strictly sequential per team.
        # Reconnects are driven by run() so refused credentials end the session.
        rtm = RTMClient(
            web_client=self.web_client,
            concurrency=1,
            auto_reconnect_enabled=False,
            logger=logging.getLogger("votebot.rtm"),
        )

        def on_event(client, event):
            self.handle_event(event)

        for event_type in HANDLED_EVENTS:
            rtm.on(event_type)(on_event)
        return rtm

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def handle_event(self, event: dict) -> None:
        """Process one inbound RTM event; never raises."""
        kind = event.get("type")
        self.log.debug("Received event %s", kind)
        try:
            if kind == "message":
                self.deliver(self.handle_message(event))
            elif kind == "user_change":
                self.roster.update_user(event.get("user") or {})
            elif kind == "team_rename":
                self.roster.update_team({"id": self.team_id, "name": event.get("name")})
            elif kind == "error":
                error = event.get("error") or {}
                self.log.warning("RTM error code=%s msg=%s", error.get("code"), error.get("msg"))
        except Exception:
            self.log.exception("Failed to handle %s event", kind)

    def handle_message(self, event: dict) -> list[Reply]:
        """Classify and apply one chat message; returns the replies to post.

        All database work for the message happens in one transaction. On a
        database error nothing is persisted and no reply is produced.
        """
        # Edits, joins, bot posts and the like carry a subtype.
        if event.get("subtype") or event.get("bot_id"):
            return []
        user_id = event.get("user", "")
        channel = event.get("channel", "")
        if not user_id or user_id == self.bot_user_id:
            return []

        log = self.log.bind(user=user_id, channel=channel)
        try:
            with transaction.atomic():
                is_bot = self.roster.is_bot(user_id)
                if is_bot:
                    log.debug("Ignoring message; from bot")
                    return []
                if is_bot is None:
                    log.debug("Author not in roster; treating as human")
                try:
                    command = self.grammar.classify(event.get("text", ""), log)
                except CommandSyntaxError as exc:
                    return [Reply(channel, format_syntax_error(user_id, exc))]
                return self.dispatch(command, user_id, channel, log)
        except DatabaseError:
            log.exception("Failed to apply message; rolled back")
            return []

    def dispatch(self, command, user_id: str, channel: str, log) -> list[Reply]:
        ledger = VoteLedger(self.team_id, log)
        if isinstance(command, ProposeTopic):
            ledger.propose(channel, command.name, command.comment)
            return [Reply(channel, format_voting_open(command.name))]
        if isinstance(command, CastVote):
            try:
                ledger.cast_vote(user_id, command.topic_name, command.value, command.comment)
            except TopicClosed as exc:
                log.info("Rejected vote on closed topic %s", exc.name)
                return [Reply(channel, format_vote_rejected(user_id, exc.name))]
            return []
        if isinstance(command, DirectedCommand):
            texts = run_directed(ledger, command.verb, command.args, user_id, channel)
            return [Reply(channel, text) for text in texts]
        return []

    def deliver(self, replies: list[Reply]) -> None:
        """Post replies as the bot user; failures are logged, not retried."""
        for reply in replies:
            try:
                self.web_client.chat_postMessage(channel=reply.channel, text=reply.text, as_user=True)
            except SlackApiError as exc:
                self.log.bind(channel=reply.channel).warning(
                    "Failed to post reply: %s", exc.response.get("error"),
                )
