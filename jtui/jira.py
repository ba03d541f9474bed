#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

from typing import Any, Dict, List, Optional, Sequence

import requests

import jtui

from jtui.filters import IssueFilter
from jtui.models import Board, Issue, Paginated, Worklog, WorklogEntry

logger = jtui.logger

AGILE_API = 'rest/agile/1.0'
CORE_API = 'rest/api/3'


class JiraClient:
    """Thin wrapper around the Jira Cloud REST API.

    Holds no per-call state, so one instance can be shared by every
    background worker.  All failures are raised as :class:`jtui.JiraError`
    subclasses.
    """

    def __init__(self, conn: jtui.Connection, session: Optional[requests.Session] = None) -> None:
        self.conn = conn
        self.session = session if session is not None else jtui.get_jira_session(conn)

    def _url(self, *parts: Any) -> str:
        return '/'.join([self.conn.base_url] + [str(x) for x in parts])

    def _request(self, method: str, url: str, what: str, notfound: str,
                 expected: Sequence[int] = (200,), **kwargs: Any) -> requests.Response:
        logger.debug('%s %s params=%s', method, url, kwargs.get('params'))
        try:
            rsp = self.session.request(method, url, timeout=self.conn.timeout, **kwargs)
        except requests.exceptions.RequestException as ex:
            raise jtui.ApiError(f'{what}: {ex}')
        if rsp.status_code in expected:
            return rsp
        if rsp.status_code == 401:
            raise jtui.UnauthorizedError()
        if rsp.status_code == 404:
            raise jtui.NotFoundError(notfound)
        raise jtui.ApiError(f'{what}: {rsp.status_code} {rsp.reason}')

    @staticmethod
    def _json(rsp: requests.Response, what: str) -> Dict[str, Any]:
        try:
            return rsp.json()
        except ValueError as ex:
            raise jtui.ApiError(f'Failed to parse {what}: {ex}')

    def list_boards(self) -> List[Board]:
        url = self._url(AGILE_API, 'board')
        rsp = self._request('GET', url, 'Failed to get boards', 'Boards not found',
                            params={'maxResults': 100})
        data = self._json(rsp, 'boards')
        try:
            return [Board.from_json(x) for x in data.get('values', [])]
        except (KeyError, TypeError, ValueError) as ex:
            raise jtui.ApiError(f'Failed to parse boards: {ex}')

    def list_issues(self, board_id: int, start_at: int, max_results: int,
                    issue_filter: IssueFilter) -> Paginated[Issue]:
        url = self._url(AGILE_API, 'board', board_id, 'issue')
        params = {
            'startAt': start_at,
            'maxResults': max_results,
            'jql': issue_filter.to_jql(),
        }
        rsp = self._request('GET', url, 'Failed to get issues', f'Board {board_id} not found',
                            params=params)
        data = self._json(rsp, 'issues')
        try:
            issues = [Issue.from_json(x) for x in data.get('issues', [])]
            return Paginated.from_items(issues, int(data.get('total', len(issues))),
                                        int(data.get('startAt', start_at)),
                                        int(data.get('maxResults', max_results)))
        except (KeyError, TypeError, ValueError) as ex:
            raise jtui.ApiError(f'Failed to parse issues: {ex}')

    def add_worklog(self, worklog: Worklog) -> None:
        url = self._url(CORE_API, 'issue', worklog.issue_key, 'worklog')
        payload = worklog.to_json()
        logger.debug('Worklog payload: %s', payload)
        self._request('POST', url, 'Failed to add worklog', f'Issue {worklog.issue_key} not found',
                      expected=(200, 201), json=payload)

    def list_worklogs(self, issue_key: str, start_at: int, max_results: int) -> Paginated[WorklogEntry]:
        url = self._url(CORE_API, 'issue', issue_key, 'worklog')
        params = {
            'startAt': start_at,
            'maxResults': max_results,
        }
        rsp = self._request('GET', url, 'Failed to get worklogs', f'Issue {issue_key} not found',
                            params=params)
        data = self._json(rsp, 'worklogs')
        try:
            entries = [WorklogEntry.from_json(x, issue_key) for x in data.get('worklogs', [])]
            return Paginated.from_items(entries, int(data.get('total', len(entries))),
                                        int(data.get('startAt', start_at)),
                                        int(data.get('maxResults', max_results)))
        except (KeyError, TypeError, ValueError) as ex:
            raise jtui.ApiError(f'Failed to parse worklogs: {ex}')

    def update_worklog(self, issue_key: str, worklog_id: str, worklog: Worklog) -> None:
        url = self._url(CORE_API, 'issue', issue_key, 'worklog', worklog_id)
        self._request('PUT', url, 'Failed to update worklog', f'Worklog {worklog_id} not found',
                      json=worklog.to_json())

    def delete_worklog(self, issue_key: str, worklog_id: str) -> None:
        url = self._url(CORE_API, 'issue', issue_key, 'worklog', worklog_id)
        self._request('DELETE', url, 'Failed to delete worklog', f'Worklog {worklog_id} not found',
                      expected=(200, 204))

    def transition_issue(self, issue_key: str, transition_id: str) -> None:
        raise jtui.UnimplementedError('Not implemented yet')
