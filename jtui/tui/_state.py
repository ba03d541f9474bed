#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
"""Screen state machine.

The whole UI is described by one immutable :class:`AppState`.  The only
way to move it forward is :func:`apply`, which takes the current state
and an :class:`Action` and returns the next state without doing any I/O.
Actions that mean nothing on the current screen return the very same
state object, so callers can use identity to tell whether anything
changed.
"""
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

import calendar
import dataclasses
import datetime
import enum

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Type

from jtui.filters import AssigneeScope, IssueFilter, SortOrder, StatusScope, compile_filter, cycle
from jtui.models import Board, Issue, Paginated, Worklog, WorklogEntry


class Screen(enum.Enum):
    DASHBOARD = 'dashboard'
    BOARD_LIST = 'boards'
    BACKLOG = 'backlog'
    ISSUE_DETAIL = 'detail'
    FILTER_MODAL = 'filter'
    WORKLOG_MODAL = 'worklog'
    WORKLOG_LIST_MODAL = 'worklogs'


class FilterField(enum.Enum):
    ASSIGNEE = 'assignee'
    STATUS = 'status'
    ORDER_BY = 'order_by'


class WorklogField(enum.Enum):
    DAY = 'day'
    MONTH = 'month'
    YEAR = 'year'
    HOUR = 'hour'
    MINUTE = 'minute'
    TIME_HOURS = 'time_hours'
    TIME_MINUTES = 'time_minutes'
    COMMENT = 'comment'


# Largest value each numeric field accepts
FIELD_LIMITS = {
    WorklogField.DAY: 31,
    WorklogField.MONTH: 12,
    WorklogField.YEAR: 9999,
    WorklogField.HOUR: 23,
    WorklogField.MINUTE: 59,
    WorklogField.TIME_HOURS: 99,
    WorklogField.TIME_MINUTES: 59,
}

# Where a modal goes back to when nothing was recorded on open
MODAL_FALLBACK = {
    Screen.FILTER_MODAL: Screen.BACKLOG,
    Screen.WORKLOG_MODAL: Screen.ISSUE_DETAIL,
    Screen.WORKLOG_LIST_MODAL: Screen.ISSUE_DETAIL,
}


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    success: bool


class Action:
    """Base class for everything that can be applied to the state."""


@dataclass(frozen=True)
class Tick(Action):
    pass


@dataclass(frozen=True)
class Quit(Action):
    pass


@dataclass(frozen=True)
class GoToBoards(Action):
    pass


@dataclass(frozen=True)
class GoToBacklog(Action):
    pass


@dataclass(frozen=True)
class SelectNext(Action):
    pass


@dataclass(frozen=True)
class SelectPrevious(Action):
    pass


@dataclass(frozen=True)
class ViewIssueDetail(Action):
    pass


@dataclass(frozen=True)
class LoadBoards(Action):
    pass


@dataclass(frozen=True)
class BoardsLoaded(Action):
    boards: Tuple[Board, ...]


@dataclass(frozen=True)
class BoardsLoadFailed(Action):
    pass


@dataclass(frozen=True)
class LoadIssues(Action):
    board_id: int


@dataclass(frozen=True)
class LoadMoreIssues(Action):
    """Continuation page requested by the infinite scroll guard."""
    start_at: int


@dataclass(frozen=True)
class IssuesLoaded(Action):
    """A page of issues.  A *request* of None skips the staleness check."""
    page: Paginated[Issue]
    request: Optional[int] = None


@dataclass(frozen=True)
class IssuesLoadFailed(Action):
    request: Optional[int] = None


@dataclass(frozen=True)
class OpenFilterModal(Action):
    pass


@dataclass(frozen=True)
class CloseFilterModal(Action):
    pass


@dataclass(frozen=True)
class NextFilterField(Action):
    pass


@dataclass(frozen=True)
class PreviousFilterField(Action):
    pass


@dataclass(frozen=True)
class CycleAssigneeFilter(Action):
    pass


@dataclass(frozen=True)
class CycleStatusFilter(Action):
    pass


@dataclass(frozen=True)
class CycleOrderByFilter(Action):
    pass


@dataclass(frozen=True)
class ApplyFilter(Action):
    pass


@dataclass(frozen=True)
class OpenWorklogModal(Action):
    # Seed time, local; None means now
    now: Optional[datetime.datetime] = None


@dataclass(frozen=True)
class CloseWorklogModal(Action):
    pass


@dataclass(frozen=True)
class NextWorklogField(Action):
    pass


@dataclass(frozen=True)
class PreviousWorklogField(Action):
    pass


@dataclass(frozen=True)
class InputWorklogDigit(Action):
    digit: int


@dataclass(frozen=True)
class InputWorklogChar(Action):
    char: str


@dataclass(frozen=True)
class DeleteWorklogChar(Action):
    pass


@dataclass(frozen=True)
class SubmitWorklog(Action):
    pass


@dataclass(frozen=True)
class WorklogSaved(Action):
    """The server accepted a create or update; leave the worklog modal."""


@dataclass(frozen=True)
class OpenWorklogListModal(Action):
    pass


@dataclass(frozen=True)
class CloseWorklogListModal(Action):
    pass


@dataclass(frozen=True)
class LoadWorklogs(Action):
    issue_key: str


@dataclass(frozen=True)
class WorklogsLoaded(Action):
    page: Paginated[WorklogEntry]
    request: Optional[int] = None


@dataclass(frozen=True)
class SelectWorklogForEdit(Action):
    pass


@dataclass(frozen=True)
class SelectWorklogForDelete(Action):
    pass


@dataclass(frozen=True)
class ShowNotification(Action):
    title: str
    message: str
    success: bool


@dataclass(frozen=True)
class HideNotification(Action):
    pass


@dataclass(frozen=True)
class AppState:
    screen: Screen = Screen.DASHBOARD
    previous_screen: Optional[Screen] = None
    should_quit: bool = False
    loading: bool = False

    boards: Tuple[Board, ...] = ()
    selected_board_index: int = 0

    issues: Tuple[Issue, ...] = ()
    selected_issue_index: int = 0
    total_issues: int = 0
    current_board_id: Optional[int] = None
    issues_request: int = 0
    vertical_scroll: int = 0

    filter_assignee: AssigneeScope = AssigneeScope.CURRENT_USER
    filter_status: StatusScope = StatusScope.ALL
    filter_order_by: SortOrder = SortOrder.UPDATED_DESC
    filter_focused_field: FilterField = FilterField.ASSIGNEE

    worklog_day: int = 1
    worklog_month: int = 1
    worklog_year: int = 1970
    worklog_hour: int = 0
    worklog_minute: int = 0
    worklog_time_hours: int = 0
    worklog_time_minutes: int = 0
    worklog_comment: str = ''
    worklog_focused_field: WorklogField = WorklogField.DAY
    worklog_being_edited: Optional[WorklogEntry] = None

    worklogs: Tuple[WorklogEntry, ...] = ()
    selected_worklog_index: int = 0
    total_worklogs: int = 0
    worklogs_request: int = 0

    notification: Optional[Notification] = None

    def selected_board(self) -> Optional[Board]:
        if 0 <= self.selected_board_index < len(self.boards):
            return self.boards[self.selected_board_index]
        return None

    def selected_issue(self) -> Optional[Issue]:
        if 0 <= self.selected_issue_index < len(self.issues):
            return self.issues[self.selected_issue_index]
        return None

    def selected_worklog(self) -> Optional[WorklogEntry]:
        if 0 <= self.selected_worklog_index < len(self.worklogs):
            return self.worklogs[self.selected_worklog_index]
        return None

    def issue_filter(self) -> IssueFilter:
        return compile_filter(self.filter_assignee, self.filter_status, self.filter_order_by)

    def worklog_field_value(self, fld: WorklogField) -> int:
        return getattr(self, f'worklog_{fld.value}')

    def worklog_seconds(self) -> int:
        return self.worklog_time_hours * 3600 + self.worklog_time_minutes * 60

    def worklog_started_at(self) -> Optional[datetime.datetime]:
        """Compose the local date/time buffers into a UTC instant.

        Returns None when the fields do not form a real calendar date, or
        name a local time that is skipped or repeated by a DST change.
        """
        if not 1 <= self.worklog_year <= 9999 or not 1 <= self.worklog_month <= 12:
            return None
        if not 1 <= self.worklog_day <= calendar.monthrange(self.worklog_year, self.worklog_month)[1]:
            return None
        try:
            local = datetime.datetime(self.worklog_year, self.worklog_month, self.worklog_day,
                                      self.worklog_hour, self.worklog_minute)
            early = local.astimezone()
            late = local.replace(fold=1).astimezone()
        except (ValueError, OverflowError, OSError):
            return None
        if early.replace(tzinfo=None) != local or early.utcoffset() != late.utcoffset():
            return None
        return early.astimezone(datetime.timezone.utc)

    def build_worklog(self) -> Optional[Worklog]:
        """The worklog described by the edit buffers, or None if it is not submittable."""
        issue = self.selected_issue()
        started_at = self.worklog_started_at()
        seconds = self.worklog_seconds()
        if issue is None or started_at is None or seconds <= 0:
            return None
        return Worklog(issue_key=issue.key, time_spent_seconds=seconds, started_at=started_at,
                       comment=self.worklog_comment or None)


def _clamp(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


def _close_modal(state: AppState, modal: Screen) -> AppState:
    if state.screen != modal:
        return state
    target = state.previous_screen or MODAL_FALLBACK[modal]
    return dataclasses.replace(state, screen=target, previous_screen=None)


def _on_quit(state: AppState, action: Quit) -> AppState:
    return dataclasses.replace(state, should_quit=True)


def _on_go_to_boards(state: AppState, action: GoToBoards) -> AppState:
    if state.screen != Screen.BACKLOG:
        return state
    return dataclasses.replace(state, screen=Screen.BOARD_LIST, vertical_scroll=0)


def _on_go_to_backlog(state: AppState, action: GoToBacklog) -> AppState:
    if state.screen != Screen.ISSUE_DETAIL:
        return state
    return dataclasses.replace(state, screen=Screen.BACKLOG, vertical_scroll=0)


def _on_view_issue_detail(state: AppState, action: ViewIssueDetail) -> AppState:
    if state.screen != Screen.BACKLOG or not state.issues:
        return state
    return dataclasses.replace(state, screen=Screen.ISSUE_DETAIL, vertical_scroll=0)


def _on_select_next(state: AppState, action: SelectNext) -> AppState:
    if state.screen in (Screen.DASHBOARD, Screen.BOARD_LIST):
        if state.selected_board_index + 1 < len(state.boards):
            return dataclasses.replace(state, selected_board_index=state.selected_board_index + 1)
    elif state.screen == Screen.BACKLOG:
        if state.selected_issue_index + 1 < len(state.issues):
            return dataclasses.replace(state, selected_issue_index=state.selected_issue_index + 1)
    elif state.screen == Screen.WORKLOG_LIST_MODAL:
        if state.selected_worklog_index + 1 < len(state.worklogs):
            return dataclasses.replace(state, selected_worklog_index=state.selected_worklog_index + 1)
    elif state.screen == Screen.ISSUE_DETAIL:
        # The renderer clips, so there is no upper bound here
        return dataclasses.replace(state, vertical_scroll=state.vertical_scroll + 1)
    return state


def _on_select_previous(state: AppState, action: SelectPrevious) -> AppState:
    if state.screen in (Screen.DASHBOARD, Screen.BOARD_LIST):
        if state.selected_board_index > 0:
            return dataclasses.replace(state, selected_board_index=state.selected_board_index - 1)
    elif state.screen == Screen.BACKLOG:
        if state.selected_issue_index > 0:
            return dataclasses.replace(state, selected_issue_index=state.selected_issue_index - 1)
    elif state.screen == Screen.WORKLOG_LIST_MODAL:
        if state.selected_worklog_index > 0:
            return dataclasses.replace(state, selected_worklog_index=state.selected_worklog_index - 1)
    elif state.screen == Screen.ISSUE_DETAIL:
        if state.vertical_scroll > 0:
            return dataclasses.replace(state, vertical_scroll=state.vertical_scroll - 1)
    return state


def _on_load_boards(state: AppState, action: LoadBoards) -> AppState:
    return dataclasses.replace(state, loading=True)


def _on_boards_loaded(state: AppState, action: BoardsLoaded) -> AppState:
    return dataclasses.replace(state, boards=tuple(action.boards), selected_board_index=0, loading=False,
                               screen=Screen.BOARD_LIST, vertical_scroll=0)


def _on_boards_load_failed(state: AppState, action: BoardsLoadFailed) -> AppState:
    if not state.loading:
        return state
    return dataclasses.replace(state, loading=False)


def _on_load_issues(state: AppState, action: LoadIssues) -> AppState:
    return dataclasses.replace(state, screen=Screen.BACKLOG, previous_screen=None, issues=(),
                               selected_issue_index=0, vertical_scroll=0, total_issues=0,
                               current_board_id=action.board_id, loading=True,
                               issues_request=state.issues_request + 1)


def _on_load_more_issues(state: AppState, action: LoadMoreIssues) -> AppState:
    if state.loading or state.current_board_id is None:
        return state
    return dataclasses.replace(state, loading=True)


def _on_issues_loaded(state: AppState, action: IssuesLoaded) -> AppState:
    if action.request is not None and action.request != state.issues_request:
        # Superseded by a newer page-1 load
        return state
    page = action.page
    if page.start_at == 0:
        issues = tuple(page.items)
        selected = 0
    else:
        issues = state.issues + tuple(page.items)
        selected = state.selected_issue_index
    total = page.total
    if page.start_at > 0 and not page.items:
        # Server claims more than it hands out; stop asking
        total = len(issues)
    return dataclasses.replace(state, issues=issues, selected_issue_index=_clamp(selected, len(issues)),
                               total_issues=total, loading=False)


def _on_issues_load_failed(state: AppState, action: IssuesLoadFailed) -> AppState:
    if action.request is not None and action.request != state.issues_request:
        return state
    if not state.loading:
        return state
    if state.issues:
        # A continuation page failed; keep what we have until the next reload
        return dataclasses.replace(state, loading=False, total_issues=len(state.issues))
    return dataclasses.replace(state, loading=False)


def _on_open_filter_modal(state: AppState, action: OpenFilterModal) -> AppState:
    if state.screen != Screen.BACKLOG:
        return state
    return dataclasses.replace(state, previous_screen=state.screen, screen=Screen.FILTER_MODAL,
                               filter_focused_field=FilterField.ASSIGNEE)


def _on_close_filter_modal(state: AppState, action: CloseFilterModal) -> AppState:
    return _close_modal(state, Screen.FILTER_MODAL)


def _on_next_filter_field(state: AppState, action: NextFilterField) -> AppState:
    if state.screen != Screen.FILTER_MODAL:
        return state
    return dataclasses.replace(state, filter_focused_field=cycle(state.filter_focused_field))


def _on_previous_filter_field(state: AppState, action: PreviousFilterField) -> AppState:
    if state.screen != Screen.FILTER_MODAL:
        return state
    members = list(FilterField)
    idx = members.index(state.filter_focused_field)
    return dataclasses.replace(state, filter_focused_field=members[idx - 1])


def _on_cycle_assignee(state: AppState, action: CycleAssigneeFilter) -> AppState:
    if state.screen != Screen.FILTER_MODAL:
        return state
    return dataclasses.replace(state, filter_assignee=cycle(state.filter_assignee))


def _on_cycle_status(state: AppState, action: CycleStatusFilter) -> AppState:
    if state.screen != Screen.FILTER_MODAL:
        return state
    return dataclasses.replace(state, filter_status=cycle(state.filter_status))


def _on_cycle_order_by(state: AppState, action: CycleOrderByFilter) -> AppState:
    if state.screen != Screen.FILTER_MODAL:
        return state
    return dataclasses.replace(state, filter_order_by=cycle(state.filter_order_by))


def _on_apply_filter(state: AppState, action: ApplyFilter) -> AppState:
    if state.screen != Screen.FILTER_MODAL:
        return state
    state = _close_modal(state, Screen.FILTER_MODAL)
    if state.current_board_id is None:
        return state
    return dataclasses.replace(state, loading=True, vertical_scroll=0,
                               issues_request=state.issues_request + 1)


def _seed_worklog_fields(state: AppState, started: datetime.datetime, seconds: int,
                         comment: str, editing: Optional[WorklogEntry]) -> AppState:
    return dataclasses.replace(
        state,
        previous_screen=state.screen,
        screen=Screen.WORKLOG_MODAL,
        worklog_day=started.day,
        worklog_month=started.month,
        worklog_year=started.year,
        worklog_hour=started.hour,
        worklog_minute=started.minute,
        worklog_time_hours=min(seconds // 3600, FIELD_LIMITS[WorklogField.TIME_HOURS]),
        worklog_time_minutes=(seconds % 3600) // 60,
        worklog_comment=comment,
        worklog_focused_field=WorklogField.DAY,
        worklog_being_edited=editing,
    )


def _on_open_worklog_modal(state: AppState, action: OpenWorklogModal) -> AppState:
    if state.screen != Screen.ISSUE_DETAIL or state.selected_issue() is None:
        return state
    now = action.now if action.now is not None else datetime.datetime.now()
    return _seed_worklog_fields(state, now, 0, '', None)


def _on_select_worklog_for_edit(state: AppState, action: SelectWorklogForEdit) -> AppState:
    entry = state.selected_worklog()
    if state.screen != Screen.WORKLOG_LIST_MODAL or entry is None:
        return state
    started = entry.started_at.astimezone()
    return _seed_worklog_fields(state, started, entry.time_spent_seconds, entry.comment or '', entry)


def _on_close_worklog_modal(state: AppState, action: CloseWorklogModal) -> AppState:
    closed = _close_modal(state, Screen.WORKLOG_MODAL)
    if closed is state:
        return state
    return dataclasses.replace(closed, worklog_being_edited=None)


def _on_worklog_saved(state: AppState, action: WorklogSaved) -> AppState:
    return _on_close_worklog_modal(state, CloseWorklogModal())


def _on_next_worklog_field(state: AppState, action: NextWorklogField) -> AppState:
    if state.screen != Screen.WORKLOG_MODAL:
        return state
    return dataclasses.replace(state, worklog_focused_field=cycle(state.worklog_focused_field))


def _on_previous_worklog_field(state: AppState, action: PreviousWorklogField) -> AppState:
    if state.screen != Screen.WORKLOG_MODAL:
        return state
    members = list(WorklogField)
    idx = members.index(state.worklog_focused_field)
    return dataclasses.replace(state, worklog_focused_field=members[idx - 1])


def _on_input_worklog_digit(state: AppState, action: InputWorklogDigit) -> AppState:
    fld = state.worklog_focused_field
    if state.screen != Screen.WORKLOG_MODAL:
        return state
    if fld == WorklogField.COMMENT:
        return _on_input_worklog_char(state, InputWorklogChar(str(action.digit)))
    value = state.worklog_field_value(fld) * 10 + action.digit
    if value > FIELD_LIMITS[fld]:
        value = action.digit
    return dataclasses.replace(state, **{f'worklog_{fld.value}': value})


def _on_input_worklog_char(state: AppState, action: InputWorklogChar) -> AppState:
    if state.screen != Screen.WORKLOG_MODAL or state.worklog_focused_field != WorklogField.COMMENT:
        return state
    return dataclasses.replace(state, worklog_comment=state.worklog_comment + action.char)


def _on_delete_worklog_char(state: AppState, action: DeleteWorklogChar) -> AppState:
    fld = state.worklog_focused_field
    if state.screen != Screen.WORKLOG_MODAL:
        return state
    if fld == WorklogField.COMMENT:
        if not state.worklog_comment:
            return state
        return dataclasses.replace(state, worklog_comment=state.worklog_comment[:-1])
    return dataclasses.replace(state, **{f'worklog_{fld.value}': state.worklog_field_value(fld) // 10})


def _on_open_worklog_list_modal(state: AppState, action: OpenWorklogListModal) -> AppState:
    if state.screen != Screen.ISSUE_DETAIL or state.selected_issue() is None:
        return state
    return dataclasses.replace(state, previous_screen=state.screen, screen=Screen.WORKLOG_LIST_MODAL,
                               worklogs=(), selected_worklog_index=0, total_worklogs=0,
                               worklogs_request=state.worklogs_request + 1)


def _on_close_worklog_list_modal(state: AppState, action: CloseWorklogListModal) -> AppState:
    return _close_modal(state, Screen.WORKLOG_LIST_MODAL)


def _on_load_worklogs(state: AppState, action: LoadWorklogs) -> AppState:
    return dataclasses.replace(state, worklogs_request=state.worklogs_request + 1)


def _on_worklogs_loaded(state: AppState, action: WorklogsLoaded) -> AppState:
    if action.request is not None and action.request != state.worklogs_request:
        return state
    worklogs = tuple(action.page.items)
    return dataclasses.replace(state, worklogs=worklogs, total_worklogs=action.page.total,
                               selected_worklog_index=_clamp(state.selected_worklog_index, len(worklogs)))


def _on_show_notification(state: AppState, action: ShowNotification) -> AppState:
    return dataclasses.replace(state, notification=Notification(action.title, action.message, action.success))


def _on_hide_notification(state: AppState, action: HideNotification) -> AppState:
    if state.notification is None:
        return state
    return dataclasses.replace(state, notification=None)


_HANDLERS: Dict[Type[Action], Callable[[AppState, Action], AppState]] = {
    Quit: _on_quit,
    GoToBoards: _on_go_to_boards,
    GoToBacklog: _on_go_to_backlog,
    ViewIssueDetail: _on_view_issue_detail,
    SelectNext: _on_select_next,
    SelectPrevious: _on_select_previous,
    LoadBoards: _on_load_boards,
    BoardsLoaded: _on_boards_loaded,
    BoardsLoadFailed: _on_boards_load_failed,
    LoadIssues: _on_load_issues,
    LoadMoreIssues: _on_load_more_issues,
    IssuesLoaded: _on_issues_loaded,
    IssuesLoadFailed: _on_issues_load_failed,
    OpenFilterModal: _on_open_filter_modal,
    CloseFilterModal: _on_close_filter_modal,
    NextFilterField: _on_next_filter_field,
    PreviousFilterField: _on_previous_filter_field,
    CycleAssigneeFilter: _on_cycle_assignee,
    CycleStatusFilter: _on_cycle_status,
    CycleOrderByFilter: _on_cycle_order_by,
    ApplyFilter: _on_apply_filter,
    OpenWorklogModal: _on_open_worklog_modal,
    CloseWorklogModal: _on_close_worklog_modal,
    NextWorklogField: _on_next_worklog_field,
    PreviousWorklogField: _on_previous_worklog_field,
    InputWorklogDigit: _on_input_worklog_digit,
    InputWorklogChar: _on_input_worklog_char,
    DeleteWorklogChar: _on_delete_worklog_char,
    WorklogSaved: _on_worklog_saved,
    OpenWorklogListModal: _on_open_worklog_list_modal,
    CloseWorklogListModal: _on_close_worklog_list_modal,
    LoadWorklogs: _on_load_worklogs,
    WorklogsLoaded: _on_worklogs_loaded,
    SelectWorklogForEdit: _on_select_worklog_for_edit,
    ShowNotification: _on_show_notification,
    HideNotification: _on_hide_notification,
}


def apply(state: AppState, action: Action) -> AppState:
    """Return the state that results from applying *action* to *state*."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        # Tick, SubmitWorklog, SelectWorklogForDelete only drive effects
        return state
    return handler(state, action)
