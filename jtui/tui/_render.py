#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
"""Project the application state onto rich renderables.

Nothing in here keeps state or talks to the network; the same state
always renders to the same frame.
"""
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

import datetime

from typing import Any, Dict, List, Optional, Tuple

from rich import box
from rich.console import RenderableType
from rich.markup import escape as _escape_markup
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

import jtui

from jtui.models import IssueStatus
from jtui.tui import _state as st

HINTS: Dict[st.Screen, str] = {
    st.Screen.DASHBOARD: 'q quit',
    st.Screen.BOARD_LIST: 'enter open  j/k move  b reload  q quit',
    st.Screen.BACKLOG: 'enter detail  f filter  r refresh  b boards  q quit',
    st.Screen.ISSUE_DETAIL: 'w log time  l worklogs  j/k scroll  esc back  q quit',
    st.Screen.FILTER_MODAL: 'tab field  space/h/l change  enter apply  esc cancel',
    st.Screen.WORKLOG_MODAL: 'tab field  digits edit  backspace delete  enter save  esc cancel',
    st.Screen.WORKLOG_LIST_MODAL: 'e edit  d delete  j/k move  esc close',
}

TITLES: Dict[st.Screen, str] = {
    st.Screen.DASHBOARD: 'Dashboard',
    st.Screen.BOARD_LIST: 'Boards',
    st.Screen.BACKLOG: 'Backlog',
    st.Screen.ISSUE_DETAIL: 'Issue',
    st.Screen.FILTER_MODAL: 'Filter',
    st.Screen.WORKLOG_MODAL: 'Log time',
    st.Screen.WORKLOG_LIST_MODAL: 'Worklogs',
}

_STATUS_STYLES = {
    IssueStatus.TODO: 'cyan',
    IssueStatus.IN_PROGRESS: 'yellow',
    IssueStatus.DONE: 'green',
    IssueStatus.OTHER: 'magenta',
}

_SELECTED = 'reverse'
_FOCUSED = 'bold black on cyan'


def _local(value: datetime.datetime) -> str:
    return value.astimezone().strftime('%Y-%m-%d %H:%M')


def _window(count: int, selected: int, height: Optional[int]) -> Tuple[int, int]:
    """Return the [start, end) slice of rows that keeps *selected* visible."""
    if height is None or height <= 0 or count <= height:
        return 0, count
    start = max(0, min(selected - height // 2, count - height))
    return start, start + height


def render_title(state: st.AppState) -> Text:
    title = Text()
    title.append(f' jtui {jtui.__VERSION__} ', style='bold white on blue')
    title.append(f' {TITLES[state.screen]} ', style='bold')
    if state.loading:
        title.append(' Loading... ', style='bold yellow')
    title.append(f'  {HINTS[state.screen]}', style='dim')
    return title


def render_notification(state: st.AppState) -> Optional[Text]:
    note = state.notification
    if note is None:
        return None
    style = 'bold white on green' if note.success else 'bold white on red'
    return Text(f' {note.title}: {note.message} ', style=style)


def _render_dashboard(state: st.AppState, height: Optional[int]) -> RenderableType:
    if state.loading:
        return Text('Loading boards...', style='dim')
    return Text('No boards loaded. Press b to load boards.', style='dim')


def _render_boards(state: st.AppState, height: Optional[int]) -> RenderableType:
    if not state.boards:
        if state.loading:
            return Text('Loading boards...', style='dim')
        return Text('No boards found.', style='dim')
    table = Table(box=box.SIMPLE_HEAD, expand=True)
    table.add_column('ID', justify='right', no_wrap=True)
    table.add_column('Name', ratio=1)
    table.add_column('Project', no_wrap=True)
    table.add_column('Type', no_wrap=True)
    start, end = _window(len(state.boards), state.selected_board_index, height)
    for idx in range(start, end):
        board = state.boards[idx]
        table.add_row(str(board.id), _escape_markup(board.name), board.project_key, board.board_type,
                      style=_SELECTED if idx == state.selected_board_index else None)
    return table


def _render_backlog(state: st.AppState, height: Optional[int]) -> RenderableType:
    if not state.issues:
        if state.loading:
            return Text('Loading issues...', style='dim')
        return Text('No issues match the current filter.', style='dim')
    table = Table(box=box.SIMPLE_HEAD, expand=True,
                  caption=f'{len(state.issues)} of {state.total_issues} issues  ('
                          f'{state.filter_assignee.value} / {state.filter_status.value} / '
                          f'{state.filter_order_by.value})')
    table.add_column('Key', no_wrap=True)
    table.add_column('Summary', ratio=1)
    table.add_column('Status', no_wrap=True)
    table.add_column('Assignee', no_wrap=True)
    table.add_column('Updated', no_wrap=True)
    start, end = _window(len(state.issues), state.selected_issue_index, height)
    for idx in range(start, end):
        issue = state.issues[idx]
        table.add_row(
            issue.key,
            _escape_markup(issue.summary),
            Text(issue.status_label, style=_STATUS_STYLES[issue.status]),
            _escape_markup(issue.assignee or 'Unassigned'),
            _local(issue.updated_at),
            style=_SELECTED if idx == state.selected_issue_index else None,
        )
    return table


def _render_detail(state: st.AppState, height: Optional[int]) -> RenderableType:
    issue = state.selected_issue()
    if issue is None:
        return Text('No issue selected.', style='dim')
    lines: List[Text] = [
        Text(f'{issue.key}: {issue.summary}', style='bold'),
        Text(''),
        Text.assemble(('Status:   ', 'bold'), (issue.status_label, _STATUS_STYLES[issue.status])),
        Text.assemble(('Assignee: ', 'bold'), issue.assignee or 'Unassigned'),
        Text.assemble(('Priority: ', 'bold'), issue.priority or 'None'),
        Text.assemble(('Created:  ', 'bold'), _local(issue.created_at)),
        Text.assemble(('Updated:  ', 'bold'), _local(issue.updated_at)),
        Text(''),
    ]
    if issue.description:
        lines.extend(Text(line) for line in issue.description.splitlines())
    else:
        lines.append(Text('No description.', style='dim'))
    # Scrolling past the end just shows nothing more
    body = Text('\n').join(lines[state.vertical_scroll:])
    return Panel(body, box=box.ROUNDED, title=issue.key, title_align='left', expand=True, padding=(0, 1))


def _render_filter(state: st.AppState, height: Optional[int]) -> RenderableType:
    rows = [
        (st.FilterField.ASSIGNEE, 'Assignee', state.filter_assignee.value),
        (st.FilterField.STATUS, 'Status', state.filter_status.value),
        (st.FilterField.ORDER_BY, 'Order by', state.filter_order_by.value),
    ]
    body = Text()
    for fld, label, value in rows:
        focused = fld == state.filter_focused_field
        body.append(f'{label:<10}', style='bold')
        body.append(f' < {value} > ', style=_FOCUSED if focused else None)
        body.append('\n')
    body.append('\n')
    body.append(f'JQL: {state.issue_filter().to_jql()}', style='dim')
    return Panel(body, box=box.ROUNDED, title='Filter issues', title_align='left',
                 border_style='cyan', expand=False, padding=(0, 1))


def _render_worklog(state: st.AppState, height: Optional[int]) -> RenderableType:
    def field(fld: st.WorklogField, text: str) -> Any:
        return text, _FOCUSED if fld == state.worklog_focused_field else None

    w = st.WorklogField
    body = Text.assemble(
        ('Date      ', 'bold'),
        field(w.DAY, f'{state.worklog_day:02d}'), '/',
        field(w.MONTH, f'{state.worklog_month:02d}'), '/',
        field(w.YEAR, f'{state.worklog_year:04d}'), '\n',
        ('Time      ', 'bold'),
        field(w.HOUR, f'{state.worklog_hour:02d}'), ':',
        field(w.MINUTE, f'{state.worklog_minute:02d}'), '\n',
        ('Duration  ', 'bold'),
        field(w.TIME_HOURS, f'{state.worklog_time_hours}h'), ' ',
        field(w.TIME_MINUTES, f'{state.worklog_time_minutes}m'), '\n',
        ('Comment   ', 'bold'),
        field(w.COMMENT, state.worklog_comment or ' '), '\n',
    )
    issue = state.selected_issue()
    key = issue.key if issue is not None else ''
    if state.worklog_being_edited is not None:
        title = f'Edit worklog on {key}'
    else:
        title = f'Log time on {key}'
    return Panel(body, box=box.ROUNDED, title=title, title_align='left',
                 border_style='cyan', expand=False, padding=(0, 1))


def _render_worklog_list(state: st.AppState, height: Optional[int]) -> RenderableType:
    issue = state.selected_issue()
    title = f'Worklogs for {issue.key}' if issue is not None else 'Worklogs'
    if not state.worklogs:
        body: RenderableType = Text('No worklogs.', style='dim')
    else:
        total = sum(x.time_spent_seconds for x in state.worklogs)
        table = Table(box=box.SIMPLE_HEAD, expand=True,
                      caption=f'{len(state.worklogs)} of {state.total_worklogs} entries, '
                              f'{jtui.format_duration(total)} logged')
        table.add_column('Started', no_wrap=True)
        table.add_column('Time', justify='right', no_wrap=True)
        table.add_column('Author', no_wrap=True)
        table.add_column('Comment', ratio=1)
        start, end = _window(len(state.worklogs), state.selected_worklog_index, height)
        for idx in range(start, end):
            entry = state.worklogs[idx]
            table.add_row(_local(entry.started_at), jtui.format_duration(entry.time_spent_seconds),
                          _escape_markup(entry.author), _escape_markup(entry.comment or ''),
                          style=_SELECTED if idx == state.selected_worklog_index else None)
        body = table
    return Panel(body, box=box.ROUNDED, title=title, title_align='left',
                 border_style='cyan', expand=True, padding=(0, 1))


_BODIES = {
    st.Screen.DASHBOARD: _render_dashboard,
    st.Screen.BOARD_LIST: _render_boards,
    st.Screen.BACKLOG: _render_backlog,
    st.Screen.ISSUE_DETAIL: _render_detail,
    st.Screen.FILTER_MODAL: _render_filter,
    st.Screen.WORKLOG_MODAL: _render_worklog,
    st.Screen.WORKLOG_LIST_MODAL: _render_worklog_list,
}


def render_body(state: st.AppState, height: Optional[int] = None) -> RenderableType:
    """Render the main area for the current screen.

    *height* is the number of list rows that fit; lists are windowed
    around the selection when it is given.
    """
    return _BODIES[state.screen](state, height)
