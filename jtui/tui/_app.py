#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

from typing import Any, Callable

from textual import events
from textual.app import App, ComposeResult
from textual.message import Message
from textual.widgets import Static
from textual.worker import Worker, WorkerState

from jtui.tui import _render
from jtui.tui import _state as st
from jtui.tui._common import logger
from jtui.tui._controller import Controller
from jtui.tui._keys import action_for_key

TICK_INTERVAL = 0.25
# Table header, rule and caption around the list rows
_LIST_CHROME = 4


class ActionPosted(Message):
    """Carries an action from a worker thread back to the UI thread."""

    def __init__(self, action: st.Action) -> None:
        super().__init__()
        self.action = action


class ScreenView(Static, can_focus=True):
    """Main area.  Takes every key press and turns it into an action."""

    def on_key(self, event: events.Key) -> None:
        app = self.app
        assert isinstance(app, JiraApp)
        action = action_for_key(event.key, event.character, app.controller.state)
        if action is None:
            return
        event.stop()
        event.prevent_default()
        app.perform(action)

    def on_resize(self, event: events.Resize) -> None:
        app = self.app
        if isinstance(app, JiraApp):
            app.redraw()


class JiraApp(App[None]):
    """Textual app for browsing boards and logging time against issues."""

    TITLE = 'jtui'

    DEFAULT_CSS = """
    JiraApp {
        layout: vertical;
    }
    #jtui-title {
        dock: top;
        width: 100%;
        height: 1;
        background: $panel;
    }
    #jtui-body {
        height: 1fr;
        padding: 0 1;
    }
    #jtui-notification {
        dock: bottom;
        width: 100%;
        height: 1;
        display: none;
    }
    """

    def __init__(self, gateway: Any) -> None:
        super().__init__()
        self.controller = Controller(gateway, spawn=self._spawn, send=self._send, schedule=self._schedule)

    def compose(self) -> ComposeResult:
        yield Static(id='jtui-title')
        yield ScreenView(id='jtui-body')
        yield Static(id='jtui-notification')

    def on_mount(self) -> None:
        self.query_one('#jtui-body', ScreenView).focus()
        self.set_interval(TICK_INTERVAL, self._tick)
        self.redraw()
        self.perform(st.LoadBoards())

    def _tick(self) -> None:
        self.perform(st.Tick())

    def _spawn(self, fn: Callable[[], None], name: str) -> None:
        self.run_worker(fn, name=name, group='effects', thread=True, exit_on_error=False)

    def _send(self, action: st.Action) -> None:
        # Called from worker threads
        self.post_message(ActionPosted(action))

    def _schedule(self, delay: float, action: st.Action) -> None:
        self.set_timer(delay, lambda: self.perform(action))

    def perform(self, action: st.Action) -> None:
        """Feed one action through the controller and redraw if needed."""
        prev = self.controller.state
        state = self.controller.dispatch(action)
        if state.should_quit:
            self.exit()
            return
        if state is not prev:
            self.redraw()

    def on_action_posted(self, message: ActionPosted) -> None:
        self.perform(message.action)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state == WorkerState.ERROR:
            logger.error('Worker %s failed: %s', event.worker.name, event.worker.error)

    def redraw(self) -> None:
        state = self.controller.state
        body = self.query_one('#jtui-body', ScreenView)
        rows = max(1, body.size.height - _LIST_CHROME) if body.size.height else None
        self.query_one('#jtui-title', Static).update(_render.render_title(state))
        body.update(_render.render_body(state, rows))
        notification = self.query_one('#jtui-notification', Static)
        note = _render.render_notification(state)
        if note is None:
            notification.display = False
            notification.update('')
        else:
            notification.update(note)
            notification.display = True
