"""Tests for starting one session per registered team."""

import threading

from votebot.models import Team
from votebot.supervisor import SessionSupervisor


class FakeSession:
    instances = []

    def __init__(self, team_id, token):
        self.team_id = team_id
        self.token = token
        self.ran = threading.Event()
        self.thread_name = None
        FakeSession.instances.append(self)

    def run(self):
        self.thread_name = threading.current_thread().name
        self.ran.set()

    def stop(self):
        self.stopped = True


class CrashingSession(FakeSession):
    def run(self):
        super().run()
        raise RuntimeError("socket on fire")


def _join(supervisor):
    for thread in supervisor.threads:
        thread.join(timeout=5)
        assert not thread.is_alive()


def test_one_session_per_team(db):
    FakeSession.instances = []
    Team.objects.create(team_id="T1", name="Acme", auth_token="xoxb-1")
    Team.objects.create(team_id="T2", name="Globex", auth_token="xoxb-2")

    supervisor = SessionSupervisor(session_factory=FakeSession)
    supervisor.start()
    _join(supervisor)

    assert [(s.team_id, s.token) for s in FakeSession.instances] == [("T1", "xoxb-1"), ("T2", "xoxb-2")]
    assert all(s.ran.is_set() for s in FakeSession.instances)
    assert {s.thread_name for s in FakeSession.instances} == {"session-T1", "session-T2"}


def test_crashed_session_is_logged(db, caplog):
    Team.objects.create(team_id="T1", name="Acme", auth_token="xoxb-1")

    supervisor = SessionSupervisor(session_factory=CrashingSession)
    supervisor.start()
    _join(supervisor)

    assert "Session for team T1 crashed" in caplog.text


def test_run_blocks_until_stopped(db):
    supervisor = SessionSupervisor(session_factory=FakeSession)
    supervisor.stop()

    supervisor.run()

    assert supervisor.threads == []


def test_stop_stops_every_session(db):
    Team.objects.create(team_id="T1", name="Acme", auth_token="xoxb-1")
    supervisor = SessionSupervisor(session_factory=FakeSession)
    supervisor.start()
    _join(supervisor)

    supervisor.stop()

    assert all(getattr(s, "stopped", False) for s in supervisor.sessions)
