#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
#
__author__ = 'Konstantin Ryabitsev <konstantin@linuxfoundation.org>'

import argparse
import logging
import sys

from dotenv import load_dotenv

import jtui

logger = jtui.logger


class ConfigOption(argparse.Action):
    """Collect repeated -c key=value options into a dict."""

    def __call__(self, parser, namespace, values, option_string=None):
        config = getattr(namespace, self.dest, None) or dict()
        if '=' not in values:
            parser.error(f'config options must be key=value, not {values}')
        key, value = values.split('=', 1)
        key = key.strip().lower()
        if key.startswith('jtui.'):
            key = key[5:]
        config[key] = value
        setattr(namespace, self.dest, config)


def setup_parser() -> argparse.ArgumentParser:
    # noinspection PyTypeChecker
    parser = argparse.ArgumentParser(
        prog='jtui',
        description='Browse Jira boards and log work from the terminal',
        epilog='Credentials come from JIRA_BASE_URL, JIRA_EMAIL and JIRA_API_TOKEN, '
               'a .env file, or git config jtui.url/jtui.email/jtui.token',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=jtui.__VERSION__)
    parser.add_argument('-d', '--debug', action='store_true', default=False,
                        help='Add more debugging info to the output')
    parser.add_argument('-q', '--quiet', action='store_true', default=False,
                        help='Output critical information only')
    parser.add_argument('-c', '--config', action=ConfigOption, metavar='NAME=VALUE', default=None,
                        help='Override a configuration value, e.g. -c timeout=10')

    return parser


def cmd() -> None:
    parser = setup_parser()
    cmdargs = parser.parse_args()
    logger.setLevel(logging.DEBUG)

    ch = logging.StreamHandler()
    formatter = logging.Formatter('%(message)s')
    ch.setFormatter(formatter)

    if cmdargs.quiet:
        ch.setLevel(logging.CRITICAL)
    elif cmdargs.debug:
        ch.setLevel(logging.DEBUG)
    else:
        ch.setLevel(logging.INFO)

    logger.addHandler(ch)

    # Values already in the environment win over .env
    load_dotenv()
    jtui._setup_main_config(cmdargs)
    try:
        conn = jtui.get_connection()
    except jtui.ConfigError as ex:
        logger.critical('%s', ex)
        sys.exit(1)

    # Imported here so --help and config errors don't pay for Textual
    from jtui.jira import JiraClient
    from jtui.tui import run_tui

    client = JiraClient(conn)
    run_tui(client, logging.DEBUG if cmdargs.debug else logging.INFO)
    sys.exit(0)


if __name__ == '__main__':
    cmd()
