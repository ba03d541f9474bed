#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
"""Action dispatcher and effect runner.

The controller owns the single :class:`AppState`.  Every action goes
through :meth:`Controller.dispatch`, which applies it, starts whatever
background work it calls for, and then checks whether the backlog needs
its next page.  Background work never touches the state; it reports back
by sending further actions, which the application feeds into dispatch on
the UI thread.
"""
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

from typing import Callable, Optional

import jtui

from jtui.filters import IssueFilter
from jtui.models import Worklog
from jtui.tui import _state as st

logger = jtui.logger

PAGE_SIZE = 20
WORKLOG_PAGE_SIZE = 50
# Fetch the next page once the cursor is this close to the last loaded row
SCROLL_THRESHOLD = 2
SUCCESS_DISMISS = 3.0
FAILURE_DISMISS = 5.0

Spawn = Callable[[Callable[[], None], str], None]
Send = Callable[[st.Action], None]
Schedule = Callable[[float, st.Action], None]


def _success(message: str) -> st.ShowNotification:
    return st.ShowNotification('Success', message, True)


def _failure(message: str) -> st.ShowNotification:
    return st.ShowNotification('Error', message, False)


class Controller:
    """Glue between the pure state machine and the outside world.

    *spawn* runs a callable in the background, *send* posts an action back
    to the UI thread and must be safe to call from any thread, *schedule*
    dispatches an action after a delay in seconds.
    """

    def __init__(self, gateway, spawn: Spawn, send: Send, schedule: Schedule,
                 state: Optional[st.AppState] = None) -> None:
        self.gateway = gateway
        self.spawn = spawn
        self.send = send
        self.schedule = schedule
        self.state = state if state is not None else st.AppState()

    def dispatch(self, action: st.Action) -> st.AppState:
        prev = self.state
        self.state = st.apply(prev, action)
        self._run_effects(prev, action)
        self._check_infinite_scroll()
        return self.state

    def _run_effects(self, prev: st.AppState, action: st.Action) -> None:
        state = self.state
        if isinstance(action, st.LoadBoards):
            self.spawn(self._fetch_boards, 'boards')

        elif isinstance(action, st.LoadIssues):
            self._spawn_issues(action.board_id, 0)

        elif isinstance(action, st.LoadMoreIssues):
            if state is not prev and state.current_board_id is not None:
                self._spawn_issues(state.current_board_id, action.start_at)

        elif isinstance(action, st.ApplyFilter):
            if state is not prev and state.current_board_id is not None:
                self._spawn_issues(state.current_board_id, 0)

        elif isinstance(action, st.OpenWorklogListModal):
            issue = state.selected_issue()
            if state is not prev and issue is not None:
                self._spawn_worklogs(issue.key)

        elif isinstance(action, st.LoadWorklogs):
            self._spawn_worklogs(action.issue_key)

        elif isinstance(action, st.SubmitWorklog):
            if state.screen == st.Screen.WORKLOG_MODAL:
                self._submit_worklog()

        elif isinstance(action, st.SelectWorklogForDelete):
            entry = state.selected_worklog()
            if state.screen == st.Screen.WORKLOG_LIST_MODAL and entry is not None:
                issue_key, worklog_id = entry.issue_key, entry.id
                self.spawn(lambda: self._delete_worklog(issue_key, worklog_id), 'delete-worklog')

        elif isinstance(action, st.ShowNotification):
            delay = SUCCESS_DISMISS if action.success else FAILURE_DISMISS
            self.schedule(delay, st.HideNotification())

    def _check_infinite_scroll(self) -> None:
        state = self.state
        if state.screen != st.Screen.BACKLOG or state.loading or state.current_board_id is None:
            return
        loaded = len(state.issues)
        if not loaded or loaded >= state.total_issues:
            return
        if state.selected_issue_index >= loaded - SCROLL_THRESHOLD:
            logger.debug('Fetching issues from %s of %s', loaded, state.total_issues)
            self.dispatch(st.LoadMoreIssues(loaded))

    def _spawn_issues(self, board_id: int, start_at: int) -> None:
        issue_filter = self.state.issue_filter()
        request = self.state.issues_request
        self.spawn(lambda: self._fetch_issues(board_id, start_at, issue_filter, request), 'issues')

    def _spawn_worklogs(self, issue_key: str) -> None:
        request = self.state.worklogs_request
        self.spawn(lambda: self._fetch_worklogs(issue_key, request), 'worklogs')

    def _submit_worklog(self) -> None:
        state = self.state
        worklog = state.build_worklog()
        if worklog is None:
            if state.worklog_seconds() <= 0:
                reason = 'Cannot log 0 time'
            elif state.worklog_started_at() is None:
                reason = 'Invalid date/time'
            else:
                reason = 'No issue selected'
            logger.warning('Worklog not submitted: %s', reason)
            self.dispatch(_failure(reason))
            return
        entry = state.worklog_being_edited
        if entry is None:
            self.spawn(lambda: self._add_worklog(worklog), 'add-worklog')
        else:
            worklog_id = entry.id
            self.spawn(lambda: self._update_worklog(worklog_id, worklog), 'update-worklog')

    # Everything below runs in a worker thread

    def _fetch_boards(self) -> None:
        try:
            boards = self.gateway.list_boards()
        except jtui.JiraError as ex:
            logger.error('Error loading boards: %s', ex)
            self.send(st.BoardsLoadFailed())
            return
        self.send(st.BoardsLoaded(tuple(boards)))

    def _fetch_issues(self, board_id: int, start_at: int, issue_filter: IssueFilter, request: int) -> None:
        try:
            page = self.gateway.list_issues(board_id, start_at, PAGE_SIZE, issue_filter)
        except jtui.JiraError as ex:
            logger.error('Error loading issues: %s', ex)
            self.send(st.IssuesLoadFailed(request))
            return
        self.send(st.IssuesLoaded(page, request))

    def _fetch_worklogs(self, issue_key: str, request: int) -> None:
        try:
            page = self.gateway.list_worklogs(issue_key, 0, WORKLOG_PAGE_SIZE)
        except jtui.JiraError as ex:
            logger.error('Error loading worklogs: %s', ex)
            self.send(_failure(f'Failed to load worklogs: {ex}'))
            return
        self.send(st.WorklogsLoaded(page, request))

    def _add_worklog(self, worklog: Worklog) -> None:
        try:
            self.gateway.add_worklog(worklog)
        except jtui.JiraError as ex:
            logger.error('Error adding worklog: %s', ex)
            self.send(_failure(f'Failed to log time: {ex}'))
            return
        self.send(_success('Time logged'))
        self.send(st.WorklogSaved())

    def _update_worklog(self, worklog_id: str, worklog: Worklog) -> None:
        try:
            self.gateway.update_worklog(worklog.issue_key, worklog_id, worklog)
        except jtui.JiraError as ex:
            logger.error('Error updating worklog: %s', ex)
            self.send(_failure(f'Failed to update worklog: {ex}'))
            return
        self.send(_success('Worklog updated'))
        self.send(st.WorklogSaved())
        self.send(st.LoadWorklogs(worklog.issue_key))

    def _delete_worklog(self, issue_key: str, worklog_id: str) -> None:
        try:
            self.gateway.delete_worklog(issue_key, worklog_id)
        except jtui.JiraError as ex:
            logger.error('Error deleting worklog: %s', ex)
            self.send(_failure(f'Failed to delete worklog: {ex}'))
            return
        self.send(_success('Worklog deleted'))
        self.send(st.LoadWorklogs(issue_key))
