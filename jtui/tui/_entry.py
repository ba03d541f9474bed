#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

from typing import Any, Optional

import jtui

from jtui.tui._common import _log_to_file, logger
from jtui.tui._app import JiraApp


def run_tui(gateway: Any, loglevel: Optional[int] = None) -> None:
    """Run the interactive application until the user quits.

    Log records produced while the application runs go to the
    configured log file at *loglevel*.
    """
    logfile = jtui.get_logfile()
    logger.debug('Logging to %s while the TUI is running', logfile)
    with _log_to_file(logfile, loglevel):
        app = JiraApp(gateway)
        app.run()
