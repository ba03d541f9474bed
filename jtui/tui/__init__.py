# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
from jtui.tui._common import logger  # noqa: F401
from jtui.tui._state import AppState, Screen, apply  # noqa: F401
from jtui.tui._controller import Controller  # noqa: F401
from jtui.tui._app import JiraApp  # noqa: F401
from jtui.tui._entry import run_tui  # noqa: F401

__all__ = [
    'logger',
    'AppState', 'Screen', 'apply',
    'Controller', 'JiraApp',
    'run_tui',
]
