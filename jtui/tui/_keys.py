#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

from typing import Callable, Dict, Optional

from jtui.tui import _state as st

# Key names follow Textual's events.Key.key values
KeyMap = Dict[str, Callable[[st.AppState], Optional[st.Action]]]


def _load_selected_board(state: st.AppState) -> Optional[st.Action]:
    board = state.selected_board()
    if board is None:
        return None
    return st.LoadIssues(board.id)


def _refresh_issues(state: st.AppState) -> Optional[st.Action]:
    if state.current_board_id is None:
        return None
    return st.LoadIssues(state.current_board_id)


def _cycle_focused_filter(state: st.AppState) -> Optional[st.Action]:
    if state.filter_focused_field == st.FilterField.ASSIGNEE:
        return st.CycleAssigneeFilter()
    if state.filter_focused_field == st.FilterField.STATUS:
        return st.CycleStatusFilter()
    return st.CycleOrderByFilter()


def _const(action: st.Action) -> Callable[[st.AppState], Optional[st.Action]]:
    return lambda state: action


def _bind(keymap: KeyMap, keys: str, action: st.Action) -> None:
    for key in keys.split(','):
        keymap[key] = _const(action)


_BOARDS: KeyMap = {'enter': _load_selected_board}
_bind(_BOARDS, 'q', st.Quit())
_bind(_BOARDS, 'b', st.LoadBoards())
_bind(_BOARDS, 'j,down', st.SelectNext())
_bind(_BOARDS, 'k,up', st.SelectPrevious())

_BACKLOG: KeyMap = {'r': _refresh_issues}
_bind(_BACKLOG, 'escape,b', st.GoToBoards())
_bind(_BACKLOG, 'q', st.Quit())
_bind(_BACKLOG, 'enter', st.ViewIssueDetail())
_bind(_BACKLOG, 'f', st.OpenFilterModal())
_bind(_BACKLOG, 'j,down', st.SelectNext())
_bind(_BACKLOG, 'k,up', st.SelectPrevious())

_DETAIL: KeyMap = {}
_bind(_DETAIL, 'escape', st.GoToBacklog())
_bind(_DETAIL, 'q', st.Quit())
_bind(_DETAIL, 'w', st.OpenWorklogModal())
_bind(_DETAIL, 'l', st.OpenWorklogListModal())
_bind(_DETAIL, 'j,down', st.SelectNext())
_bind(_DETAIL, 'k,up', st.SelectPrevious())

_FILTER: KeyMap = {}
for _key in ('left', 'h', 'right', 'l', 'space'):
    _FILTER[_key] = _cycle_focused_filter
_bind(_FILTER, 'escape', st.CloseFilterModal())
_bind(_FILTER, 'q', st.Quit())
_bind(_FILTER, 'enter', st.ApplyFilter())
_bind(_FILTER, 'tab,down,j', st.NextFilterField())
_bind(_FILTER, 'shift+tab,up,k', st.PreviousFilterField())

# No quit key here, every printable character belongs to the comment
_WORKLOG: KeyMap = {}
_bind(_WORKLOG, 'escape', st.CloseWorklogModal())
_bind(_WORKLOG, 'enter', st.SubmitWorklog())
_bind(_WORKLOG, 'tab,down', st.NextWorklogField())
_bind(_WORKLOG, 'shift+tab,up', st.PreviousWorklogField())
_bind(_WORKLOG, 'backspace', st.DeleteWorklogChar())

_WORKLOG_LIST: KeyMap = {}
_bind(_WORKLOG_LIST, 'escape', st.CloseWorklogListModal())
_bind(_WORKLOG_LIST, 'q', st.Quit())
_bind(_WORKLOG_LIST, 'enter,e', st.SelectWorklogForEdit())
_bind(_WORKLOG_LIST, 'd', st.SelectWorklogForDelete())
_bind(_WORKLOG_LIST, 'j,down', st.SelectNext())
_bind(_WORKLOG_LIST, 'k,up', st.SelectPrevious())

KEYMAPS: Dict[st.Screen, KeyMap] = {
    st.Screen.DASHBOARD: _BOARDS,
    st.Screen.BOARD_LIST: _BOARDS,
    st.Screen.BACKLOG: _BACKLOG,
    st.Screen.ISSUE_DETAIL: _DETAIL,
    st.Screen.FILTER_MODAL: _FILTER,
    st.Screen.WORKLOG_MODAL: _WORKLOG,
    st.Screen.WORKLOG_LIST_MODAL: _WORKLOG_LIST,
}


def action_for_key(key: str, character: Optional[str], state: st.AppState) -> Optional[st.Action]:
    """Map a key press on the current screen to an action, or None.

    *key* is the normalised key name (``enter``, ``shift+tab``, ``j``),
    *character* the printable character if there is one.
    """
    keymap = KEYMAPS[state.screen]
    handler = keymap.get(key)
    if handler is not None:
        return handler(state)
    if state.screen == st.Screen.WORKLOG_MODAL and character and character.isprintable():
        if character in '0123456789' and state.worklog_focused_field != st.WorklogField.COMMENT:
            return st.InputWorklogDigit(int(character))
        return st.InputWorklogChar(character)
    return None
