import datetime
import json
import os

import pytest
import requests

from unittest import mock

import jtui

from jtui.filters import IssueFilter
from jtui.jira import JiraClient
from jtui.models import IssueStatus, Worklog

CONN = jtui.Connection('https://example.atlassian.net', 'me@example.com', 'secret', timeout=12.5)


def make_response(status: int = 200, payload=None, reason: str = 'OK') -> mock.Mock:
    rsp = mock.Mock()
    rsp.status_code = status
    rsp.reason = reason
    if payload is None:
        rsp.json.side_effect = ValueError('No JSON')
    else:
        rsp.json.return_value = payload
    return rsp


def load_sample(sampledir: str, name: str):
    with open(os.path.join(sampledir, name), 'r') as fh:
        return json.load(fh)


@pytest.fixture(scope="function")
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture(scope="function")
def client(session):
    return JiraClient(CONN, session=session)


def test_list_boards(client, session, sampledir) -> None:
    session.request.return_value = make_response(payload=load_sample(sampledir, 'boards.json'))
    boards = client.list_boards()
    session.request.assert_called_once_with('GET', 'https://example.atlassian.net/rest/agile/1.0/board',
                                            timeout=12.5, params={'maxResults': 100})
    assert [(x.id, x.project_key, x.board_type) for x in boards] == [(7, 'PROJ', 'scrum'), (12, 'UNKNOWN', 'kanban')]


def test_list_issues(client, session, sampledir) -> None:
    session.request.return_value = make_response(payload=load_sample(sampledir, 'issues.json'))
    page = client.list_issues(7, 20, 20, IssueFilter('currentUser()', 'To Do', 'updated DESC'))
    args, kwargs = session.request.call_args
    assert args == ('GET', 'https://example.atlassian.net/rest/agile/1.0/board/7/issue')
    assert kwargs['params'] == {
        'startAt': 20,
        'maxResults': 20,
        'jql': 'assignee = currentUser() AND status = "To Do" ORDER BY updated DESC',
    }
    assert (page.start_at, page.total, len(page.items)) == (20, 45, 2)
    first, second = page.items
    assert first.status == IssueStatus.IN_PROGRESS
    assert first.description == 'Load twenty at a time.\nThen the rest.'
    assert first.priority == 'High'
    assert second.assignee is None
    assert second.description is None


def test_list_worklogs(client, session, sampledir) -> None:
    session.request.return_value = make_response(payload=load_sample(sampledir, 'worklogs.json'))
    page = client.list_worklogs('PROJ-21', 0, 50)
    args, kwargs = session.request.call_args
    assert args == ('GET', 'https://example.atlassian.net/rest/api/3/issue/PROJ-21/worklog')
    assert kwargs['params'] == {'startAt': 0, 'maxResults': 50}
    (entry,) = page.items
    assert entry.id == '30001'
    assert entry.issue_key == 'PROJ-21'
    assert entry.comment == 'Pairing'
    assert entry.started_at == datetime.datetime(2024, 1, 15, 9, 0, tzinfo=datetime.timezone.utc)


def test_add_worklog(client, session) -> None:
    session.request.return_value = make_response(201, {'id': '30002'})
    started = datetime.datetime(2024, 1, 15, 9, 0, tzinfo=datetime.timezone.utc)
    client.add_worklog(Worklog('PROJ-21', 1800, started, 'Standup'))
    args, kwargs = session.request.call_args
    assert args == ('POST', 'https://example.atlassian.net/rest/api/3/issue/PROJ-21/worklog')
    assert kwargs['json']['timeSpentSeconds'] == 1800
    assert kwargs['json']['started'] == '2024-01-15T09:00:00.000+0000'


def test_update_and_delete_worklog(client, session) -> None:
    started = datetime.datetime(2024, 1, 15, 9, 0, tzinfo=datetime.timezone.utc)
    session.request.return_value = make_response(200, {})
    client.update_worklog('PROJ-21', '30001', Worklog('PROJ-21', 600, started))
    args, kwargs = session.request.call_args
    assert args == ('PUT', 'https://example.atlassian.net/rest/api/3/issue/PROJ-21/worklog/30001')
    assert 'comment' not in kwargs['json']

    session.request.return_value = make_response(204)
    client.delete_worklog('PROJ-21', '30001')
    args, kwargs = session.request.call_args
    assert args == ('DELETE', 'https://example.atlassian.net/rest/api/3/issue/PROJ-21/worklog/30001')


@pytest.mark.parametrize('status,exc,text', [
    (401, jtui.UnauthorizedError, 'Unauthorized operation. Check credentials.'),
    (404, jtui.NotFoundError, 'Resource not found: Board 7 not found'),
    (500, jtui.ApiError, 'Network/API Error: Failed to get issues: 500 Server Error'),
])
def test_status_errors(client, session, status: int, exc, text: str) -> None:
    session.request.return_value = make_response(status, {}, reason='Server Error')
    with pytest.raises(exc) as excinfo:
        client.list_issues(7, 0, 20, IssueFilter())
    assert str(excinfo.value) == text


def test_transport_errors(client, session) -> None:
    session.request.side_effect = requests.exceptions.Timeout('read timed out')
    with pytest.raises(jtui.ApiError) as excinfo:
        client.list_boards()
    assert 'read timed out' in str(excinfo.value)


def test_bad_json(client, session) -> None:
    session.request.return_value = make_response(200, None)
    with pytest.raises(jtui.ApiError):
        client.list_worklogs('PROJ-1', 0, 50)


def test_malformed_payload(client, session) -> None:
    session.request.return_value = make_response(200, {'values': [{'name': 'no id'}]})
    with pytest.raises(jtui.ApiError):
        client.list_boards()


def test_transition_unimplemented(client) -> None:
    with pytest.raises(jtui.UnimplementedError) as excinfo:
        client.transition_issue('PROJ-1', '31')
    assert str(excinfo.value) == 'Unknown Internal Error: Not implemented yet'


def test_session_setup() -> None:
    session = jtui.get_jira_session(CONN)
    assert session.auth == ('me@example.com', 'secret')
    assert session.headers['Accept'] == 'application/json'
    assert session.headers['User-Agent'] == f'jtui/{jtui.__VERSION__}'
