import datetime
import os

import pytest  # noqa

import jtui

from typing import Any, Callable, List, Optional, Tuple

from jtui.models import Board, Issue, IssueStatus, Paginated, WorklogEntry
from jtui.tui import _state as st
from jtui.tui._controller import Controller

UTC = datetime.timezone.utc
T0 = datetime.datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


@pytest.fixture(scope="function", autouse=True)
def settestdefaults(tmp_path, monkeypatch):
    jtui.MAIN_CONFIG = dict(jtui.DEFAULT_CONFIG)
    for envvar in jtui.ENV_CONFIG.values():
        monkeypatch.delenv(envvar, raising=False)
    monkeypatch.setenv('XDG_STATE_HOME', str(tmp_path))
    yield
    jtui.MAIN_CONFIG = None


@pytest.fixture(scope="function")
def sampledir(request):
    return os.path.join(request.fspath.dirname, 'samples')


def make_board(bid: int, name: Optional[str] = None) -> Board:
    return Board(id=bid, name=name or f'Board {bid}', project_key=f'P{bid}', board_type='scrum')


def make_issue(num: int, status: IssueStatus = IssueStatus.TODO) -> Issue:
    return Issue(key=f'PROJ-{num}', summary=f'Issue number {num}', status=status,
                 status_name=status.value, created_at=T0, updated_at=T0)


def make_issues(start: int, count: int) -> Tuple[Issue, ...]:
    return tuple(make_issue(x) for x in range(start, start + count))


def make_entry(wid: str, issue_key: str = 'PROJ-0', seconds: int = 3600,
               comment: Optional[str] = None) -> WorklogEntry:
    return WorklogEntry(id=wid, issue_key=issue_key, time_spent_seconds=seconds, started_at=T0,
                        author='Test User', created_at=T0, updated_at=T0, comment=comment)


def issue_page(start_at: int, count: int, total: int) -> Paginated[Issue]:
    return Paginated.from_items(list(make_issues(start_at, count)), total, start_at, 20)


class FakeGateway:
    """Records every call and answers from canned data."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.boards: List[Board] = [make_board(1), make_board(7)]
        self.total_issues = 45
        self.worklogs: List[WorklogEntry] = []
        self.fail: Optional[jtui.JiraError] = None

    def _call(self, *args: Any) -> None:
        self.calls.append(args)
        if self.fail is not None:
            raise self.fail

    def list_boards(self) -> List[Board]:
        self._call('list_boards')
        return list(self.boards)

    def list_issues(self, board_id, start_at, max_results, issue_filter) -> Paginated[Issue]:
        self._call('list_issues', board_id, start_at, max_results, issue_filter)
        count = max(0, min(max_results, self.total_issues - start_at))
        return Paginated.from_items(list(make_issues(start_at, count)), self.total_issues,
                                    start_at, max_results)

    def list_worklogs(self, issue_key, start_at, max_results) -> Paginated[WorklogEntry]:
        self._call('list_worklogs', issue_key, start_at, max_results)
        return Paginated.from_items(list(self.worklogs), len(self.worklogs), start_at, max_results)

    def add_worklog(self, worklog) -> None:
        self._call('add_worklog', worklog)

    def update_worklog(self, issue_key, worklog_id, worklog) -> None:
        self._call('update_worklog', issue_key, worklog_id, worklog)

    def delete_worklog(self, issue_key, worklog_id) -> None:
        self._call('delete_worklog', issue_key, worklog_id)

    def named(self, name: str) -> List[Tuple[Any, ...]]:
        return [x for x in self.calls if x[0] == name]


class Harness:
    """Drives a Controller with synchronous, inspectable hooks.

    Spawned work is queued until run_pending(), sent actions until
    deliver(), and scheduled actions are recorded with their delay.
    """

    def __init__(self, gateway: FakeGateway, state: Optional[st.AppState] = None) -> None:
        self.gateway = gateway
        self.pending: List[Callable[[], None]] = []
        self.outbox: List[st.Action] = []
        self.scheduled: List[Tuple[float, st.Action]] = []
        self.controller = Controller(gateway, spawn=self._spawn, send=self.outbox.append,
                                     schedule=self._schedule, state=state)

    def _spawn(self, fn: Callable[[], None], name: str) -> None:
        self.pending.append(fn)

    def _schedule(self, delay: float, action: st.Action) -> None:
        self.scheduled.append((delay, action))

    @property
    def state(self) -> st.AppState:
        return self.controller.state

    def dispatch(self, action: st.Action) -> st.AppState:
        return self.controller.dispatch(action)

    def run_pending(self) -> None:
        pending, self.pending = self.pending, []
        for fn in pending:
            fn()

    def deliver(self) -> None:
        outbox = list(self.outbox)
        self.outbox.clear()
        for action in outbox:
            self.controller.dispatch(action)

    def settle(self) -> None:
        """Run background work and feed results back until nothing is left."""
        while self.pending or self.outbox:
            self.run_pending()
            self.deliver()

    def fire_timers(self) -> None:
        scheduled, self.scheduled = self.scheduled, []
        for _delay, action in scheduled:
            self.controller.dispatch(action)


@pytest.fixture(scope="function")
def gateway():
    return FakeGateway()


@pytest.fixture(scope="function")
def harness(gateway):
    return Harness(gateway)
