"""Session supervisor: one worker thread per registered team."""

from __future__ import annotations

import logging
import threading

from django.db import connection

from votebot.models import Team
from votebot.session import SlackSession

logger = logging.getLogger("votebot.supervisor")


class SessionSupervisor:
    """Starts a session for every stored team and keeps the process alive.

    Sessions share nothing but the database. A session that ends (bad
    credentials, dropped connection) is not restarted.
    """

    def __init__(self, session_factory=SlackSession) -> None:
        self.session_factory = session_factory
        self.sessions: list = []
        self.threads: list[threading.Thread] = []
        self._stopped = threading.Event()

    def load_teams(self) -> list[tuple[str, str]]:
        return list(Team.objects.order_by("team_id").values_list("team_id", "auth_token"))

    def start(self) -> None:
        for team_id, token in self.load_teams():
            session = self.session_factory(team_id, token)
            thread = threading.Thread(
                target=self._run_session,
                args=(session,),
                name=f"session-{team_id}",
                daemon=True,
            )
            self.sessions.append(session)
            self.threads.append(thread)
            thread.start()
        logger.info("Started %d team sessions", len(self.threads))

    def _run_session(self, session) -> None:
        try:
            session.run()
        except Exception:
            logger.exception("Session for team %s crashed", session.team_id)
        finally:
            # Connections are per thread; release this worker's.
            connection.close()

    def run(self) -> None:
        """Start every session, then block until ``stop()`` or process exit."""
        self.start()
        self._stopped.wait()

    def stop(self) -> None:
        for session in self.sessions:
            session.stop()
        self._stopped.set()
