import dataclasses
import datetime

from rich.console import Console

from jtui.tui import _render
from jtui.tui import _state as st
from jtui.tui._state import AppState, Screen

from conftest import make_board, make_entry, make_issues


def to_text(renderable) -> str:
    console = Console(width=120, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def test_title_shows_loading_and_hints() -> None:
    title = _render.render_title(AppState(screen=Screen.BACKLOG, loading=True)).plain
    assert 'Backlog' in title
    assert 'Loading...' in title
    assert 'f filter' in title
    assert 'Loading' not in _render.render_title(AppState(screen=Screen.BACKLOG)).plain


def test_notification_bar() -> None:
    assert _render.render_notification(AppState()) is None
    state = AppState(notification=st.Notification('Error', 'Boom', False))
    note = _render.render_notification(state)
    assert note.plain.strip() == 'Error: Boom'
    assert 'red' in str(note.style)


def test_boards_table() -> None:
    state = AppState(screen=Screen.BOARD_LIST, boards=(make_board(1), make_board(7, 'Team [core]')))
    text = to_text(_render.render_body(state))
    assert 'Board 1' in text
    assert 'Team [core]' in text
    assert 'P7' in text


def test_backlog_windowing() -> None:
    state = AppState(screen=Screen.BACKLOG, issues=make_issues(0, 40), total_issues=45,
                     selected_issue_index=30)
    text = to_text(_render.render_body(state, 10))
    assert 'PROJ-30' in text
    assert 'PROJ-0 ' not in text
    assert '40 of 45 issues' in text


def test_detail_scrolls() -> None:
    issue = dataclasses.replace(make_issues(0, 1)[0], description='line one\nline two')
    state = AppState(screen=Screen.ISSUE_DETAIL, issues=(issue,))
    assert 'Status:' in to_text(_render.render_body(state))
    scrolled = to_text(_render.render_body(dataclasses.replace(state, vertical_scroll=9)))
    assert 'line two' in scrolled
    assert 'Status:' not in scrolled


def test_filter_modal_shows_jql() -> None:
    text = to_text(_render.render_body(AppState(screen=Screen.FILTER_MODAL)))
    assert 'Everyone' not in text
    assert 'Me' in text
    assert 'assignee = currentUser() ORDER BY updated DESC' in text


def test_worklog_modal() -> None:
    state = AppState(screen=Screen.ISSUE_DETAIL, issues=make_issues(0, 1))
    state = st.apply(state, st.OpenWorklogModal(now=datetime.datetime(2024, 3, 5, 9, 7)))
    text = to_text(_render.render_body(state))
    assert 'Log time on PROJ-0' in text
    assert '05/03/2024' in text
    assert '09:07' in text
    assert '0h 0m' in text


def test_worklog_list() -> None:
    state = AppState(screen=Screen.WORKLOG_LIST_MODAL, issues=make_issues(0, 1),
                     worklogs=(make_entry('1', seconds=5400, comment='Pairing'), make_entry('2', seconds=2700)),
                     total_worklogs=2)
    text = to_text(_render.render_body(state))
    assert 'Worklogs for PROJ-0' in text
    assert '1h 30m' in text
    assert '45m' in text
    assert '2h 15m logged' in text
    assert 'Pairing' in text
