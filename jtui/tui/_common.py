#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

import logging

from typing import List, Optional

import jtui

logger = jtui.logger


class _log_to_file:
    """Context manager that moves jtui logger output into a file.

    While the TUI owns the terminal any stream output would overwrite
    the screen, so stream handlers are detached for the duration of the
    block and a file handler takes their place.  The stream handlers are
    restored on exit.
    """

    def __init__(self, logfile: str, level: Optional[int] = None) -> None:
        self.logfile = logfile
        self.level = level
        self._detached: List[logging.Handler] = []
        self._fh: Optional[logging.FileHandler] = None

    def __enter__(self) -> '_log_to_file':
        for h in list(logger.handlers):
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
                logger.removeHandler(h)
                self._detached.append(h)
        self._fh = logging.FileHandler(self.logfile, encoding='utf-8')
        self._fh.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(threadName)s: %(message)s'))
        if self.level is not None:
            self._fh.setLevel(self.level)
        logger.addHandler(self._fh)
        return self

    def __exit__(self, *exc: object) -> None:
        if self._fh is not None:
            logger.removeHandler(self._fh)
            self._fh.close()
            self._fh = None
        for h in self._detached:
            logger.addHandler(h)
        self._detached = []
