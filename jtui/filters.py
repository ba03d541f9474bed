#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
"""Turn the filter choices made in the UI into Jira query criteria.

Each axis is a small enum.  The compiled :class:`IssueFilter` holds one
optional criterion per axis; a missing criterion means no restriction
on that axis, and the ordering is always present.
"""
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

import enum

from dataclasses import dataclass
from typing import List, Optional, TypeVar

E = TypeVar('E', bound=enum.Enum)


class AssigneeScope(enum.Enum):
    CURRENT_USER = 'Me'
    UNASSIGNED = 'Unassigned'
    ALL = 'Everyone'


class StatusScope(enum.Enum):
    ALL = 'All'
    TODO = 'To Do'
    IN_PROGRESS = 'In Progress'
    DONE = 'Done'


class SortOrder(enum.Enum):
    UPDATED_DESC = 'Recently updated'
    CREATED_DESC = 'Recently created'


_ASSIGNEE_CRITERIA = {
    AssigneeScope.CURRENT_USER: 'currentUser()',
    AssigneeScope.UNASSIGNED: 'EMPTY',
    AssigneeScope.ALL: None,
}

_STATUS_CRITERIA = {
    StatusScope.ALL: None,
    StatusScope.TODO: 'To Do',
    StatusScope.IN_PROGRESS: 'In Progress',
    StatusScope.DONE: 'Done',
}

_ORDER_CRITERIA = {
    SortOrder.UPDATED_DESC: 'updated DESC',
    SortOrder.CREATED_DESC: 'created DESC',
}


@dataclass(frozen=True)
class IssueFilter:
    assignee: Optional[str] = None
    status: Optional[str] = None
    order_by: Optional[str] = None

    def to_jql(self) -> str:
        parts: List[str] = []
        if self.assignee:
            parts.append(f'assignee = {self.assignee}')
        if self.status:
            parts.append(f'status = "{self.status}"')
        jql = ' AND '.join(parts)
        if self.order_by:
            if jql:
                return f'{jql} ORDER BY {self.order_by}'
            return f'ORDER BY {self.order_by}'
        return jql


def compile_filter(assignee: AssigneeScope, status: StatusScope, order: SortOrder) -> IssueFilter:
    return IssueFilter(
        assignee=_ASSIGNEE_CRITERIA[assignee],
        status=_STATUS_CRITERIA[status],
        order_by=_ORDER_CRITERIA[order],
    )


def cycle(value: E) -> E:
    """Return the member after *value*, wrapping around to the first."""
    members = list(type(value))
    return members[(members.index(value) + 1) % len(members)]
