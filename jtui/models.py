#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

import datetime
import enum

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

import jtui

logger = jtui.logger

# Jira sends e.g. 2024-01-15T10:00:00.000+0000
JIRA_DATE_FORMAT = '%Y-%m-%dT%H:%M:%S.%f%z'
JIRA_STARTED_FORMAT = '%Y-%m-%dT%H:%M:%S.000%z'

T = TypeVar('T')


class IssueStatus(enum.Enum):
    TODO = 'To Do'
    IN_PROGRESS = 'In Progress'
    DONE = 'Done'
    OTHER = 'Other'


_STATUS_NAMES = {
    'to do': IssueStatus.TODO,
    'new': IssueStatus.TODO,
    'open': IssueStatus.TODO,
    'in progress': IssueStatus.IN_PROGRESS,
    'in review': IssueStatus.IN_PROGRESS,
    'done': IssueStatus.DONE,
    'closed': IssueStatus.DONE,
    'resolved': IssueStatus.DONE,
}


def classify_status(name: str) -> IssueStatus:
    return _STATUS_NAMES.get(name.strip().lower(), IssueStatus.OTHER)


def parse_jira_datetime(value: Optional[str]) -> datetime.datetime:
    """Parse a Jira timestamp into an aware UTC datetime.

    Falls back to the current time when the server sends something
    we cannot make sense of.
    """
    if value:
        try:
            return datetime.datetime.strptime(value, JIRA_DATE_FORMAT).astimezone(datetime.timezone.utc)
        except ValueError:
            logger.debug('Unparseable timestamp: %s', value)
    return datetime.datetime.now(datetime.timezone.utc)


def format_jira_datetime(value: datetime.datetime) -> str:
    return value.astimezone(datetime.timezone.utc).strftime(JIRA_STARTED_FORMAT)


def adf_to_text(doc: Any) -> Optional[str]:
    """Flatten an Atlassian Document Format document into plain text.

    Text nodes inside a block are joined with spaces, blocks with newlines.
    Plain strings are passed through unchanged.
    """
    if doc is None:
        return None
    if isinstance(doc, str):
        return doc
    blocks = []
    for block in doc.get('content') or []:
        texts = [node['text'] for node in block.get('content') or [] if node.get('text')]
        if texts:
            blocks.append(' '.join(texts))
    if not blocks:
        return None
    return '\n'.join(blocks)


def text_to_adf(text: str) -> Dict[str, Any]:
    return {
        'type': 'doc',
        'version': 1,
        'content': [{
            'type': 'paragraph',
            'content': [{
                'type': 'text',
                'text': text,
            }],
        }],
    }


@dataclass(frozen=True)
class Board:
    id: int
    name: str
    project_key: str
    board_type: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Board':
        location = data.get('location') or {}
        return cls(
            id=int(data['id']),
            name=data.get('name', ''),
            project_key=location.get('projectKey') or 'UNKNOWN',
            board_type=data.get('type', ''),
        )


@dataclass(frozen=True)
class Issue:
    key: str
    summary: str
    status: IssueStatus
    status_name: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    description: Optional[str] = None
    assignee: Optional[str] = None
    priority: Optional[str] = None

    @property
    def status_label(self) -> str:
        if self.status == IssueStatus.OTHER:
            return self.status_name
        return self.status.value

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Issue':
        fields = data.get('fields') or {}
        status_name = (fields.get('status') or {}).get('name', '')
        assignee = fields.get('assignee')
        priority = fields.get('priority')
        return cls(
            key=data['key'],
            summary=fields.get('summary') or '',
            status=classify_status(status_name),
            status_name=status_name,
            created_at=parse_jira_datetime(fields.get('created')),
            updated_at=parse_jira_datetime(fields.get('updated')),
            description=adf_to_text(fields.get('description')),
            assignee=assignee.get('displayName') if assignee else None,
            priority=priority.get('name') if priority else None,
        )


@dataclass(frozen=True)
class WorklogEntry:
    id: str
    issue_key: str
    time_spent_seconds: int
    started_at: datetime.datetime
    author: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    comment: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any], issue_key: str) -> 'WorklogEntry':
        author = data.get('author') or {}
        return cls(
            id=str(data['id']),
            issue_key=issue_key,
            time_spent_seconds=int(data.get('timeSpentSeconds', 0)),
            started_at=parse_jira_datetime(data.get('started')),
            author=author.get('displayName', 'Unknown'),
            created_at=parse_jira_datetime(data.get('created')),
            updated_at=parse_jira_datetime(data.get('updated')),
            comment=adf_to_text(data.get('comment')),
        )


@dataclass(frozen=True)
class Worklog:
    """A worklog as we send it to the server, for both create and update."""
    issue_key: str
    time_spent_seconds: int
    started_at: datetime.datetime
    comment: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'timeSpentSeconds': self.time_spent_seconds,
            'started': format_jira_datetime(self.started_at),
        }
        if self.comment:
            payload['comment'] = text_to_adf(self.comment)
        return payload


@dataclass(frozen=True)
class Paginated(Generic[T]):
    items: Tuple[T, ...] = field(default_factory=tuple)
    total: int = 0
    start_at: int = 0
    max_results: int = 0

    @classmethod
    def from_items(cls, items: List[T], total: int, start_at: int, max_results: int) -> 'Paginated[T]':
        return cls(items=tuple(items), total=total, start_at=start_at, max_results=max_results)
