# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2024 by the Linux Foundation
import argparse
import copy
import logging
import os
import pathlib
import subprocess

import requests

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

__VERSION__ = '0.1.0'

logger = logging.getLogger('jtui')

DEFAULT_CONFIG = {
    # Jira Cloud site, e.g. https://example.atlassian.net
    'url': None,
    # Account e-mail and API token used for basic auth
    'email': None,
    'token': None,
    # How many seconds to wait for the server before giving up on a request
    'timeout': '30',
    # Where to write log output while the TUI owns the terminal
    'logfile': None,
}

# Environment variables win over anything found in git config
ENV_CONFIG = {
    'url': 'JIRA_BASE_URL',
    'email': 'JIRA_EMAIL',
    'token': 'JIRA_API_TOKEN',
    'timeout': 'JIRA_TIMEOUT',
}

MAIN_CONFIG: Optional[Dict[str, Optional[str]]] = None


class JiraError(Exception):
    """Base class for everything that can go wrong talking to Jira."""

    prefix = 'Unknown Internal Error'

    def __init__(self, message: str = '') -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f'{self.prefix}: {self.message}'
        return self.prefix


class ConfigError(JiraError):
    prefix = 'Configuration Error'


class ApiError(JiraError):
    prefix = 'Network/API Error'


class NotFoundError(JiraError):
    prefix = 'Resource not found'


class UnauthorizedError(JiraError):
    prefix = 'Unauthorized operation. Check credentials.'

    def __str__(self) -> str:
        return self.prefix


class UnimplementedError(JiraError):
    prefix = 'Unknown Internal Error'


@dataclass(frozen=True)
class Connection:
    """Everything needed to reach the Jira instance, resolved once at startup."""
    base_url: str
    email: str
    token: str
    timeout: float = 30.0


def _run_command(cmdargs: List[str], stdin: Optional[bytes] = None) -> Tuple[int, bytes, bytes]:
    logger.debug('Running %s' % ' '.join(cmdargs))
    try:
        sp = subprocess.Popen(cmdargs, stdout=subprocess.PIPE, stdin=subprocess.PIPE, stderr=subprocess.PIPE)
    except FileNotFoundError:
        logger.debug('Could not run %s', cmdargs[0])
        return 127, b'', b''
    (output, error) = sp.communicate(input=stdin)

    return sp.returncode, output, error


def git_run_command(args: List[str]) -> Tuple[int, str]:
    cmdargs = ['git', '--no-pager'] + args
    ecode, out, err = _run_command(cmdargs)
    return ecode, out.decode(errors='replace')


def get_config_from_git(regexp: str, defaults: Optional[dict] = None) -> dict:
    args = ['config', '-z', '--get-regexp', regexp]
    ecode, out = git_run_command(args)
    gitconfig = defaults
    if not gitconfig:
        gitconfig = dict()
    if not out:
        return gitconfig

    for line in out.split('\x00'):
        if not line:
            continue
        if '\n' in line:
            key, value = line.split('\n', 1)
        else:
            key, value = line, 'true'
        cfgkey = key.split('.')[-1].lower()
        gitconfig[cfgkey] = value

    return gitconfig


def _cmdline_config_override(cmdargs: argparse.Namespace, config: dict) -> None:
    """Use cmdline.config to set and override config values."""
    overrides = getattr(cmdargs, 'config', None)
    if not overrides:
        return
    config.update(overrides)


def _setup_main_config(cmdargs: Optional[argparse.Namespace] = None) -> None:
    global MAIN_CONFIG

    config = get_config_from_git(r'jtui\..*', defaults=copy.deepcopy(DEFAULT_CONFIG))
    for key, envvar in ENV_CONFIG.items():
        val = os.environ.get(envvar)
        if val:
            logger.debug('Using %s from the environment', envvar)
            config[key] = val

    if cmdargs:
        _cmdline_config_override(cmdargs, config)

    MAIN_CONFIG = config


def get_main_config() -> Dict[str, Optional[str]]:
    if MAIN_CONFIG is None:
        _setup_main_config()
    assert MAIN_CONFIG is not None
    return MAIN_CONFIG


def get_connection() -> Connection:
    config = get_main_config()
    for key in ('url', 'email', 'token'):
        if not config.get(key):
            raise ConfigError(f'{ENV_CONFIG[key]} not set (or git config jtui.{key})')
    try:
        timeout = float(config.get('timeout') or DEFAULT_CONFIG['timeout'])
    except ValueError:
        raise ConfigError(f'Invalid timeout value: {config.get("timeout")}')
    if timeout <= 0:
        raise ConfigError(f'Invalid timeout value: {config.get("timeout")}')

    return Connection(
        base_url=str(config['url']).rstrip('/'),
        email=str(config['email']),
        token=str(config['token']),
        timeout=timeout,
    )


def get_state_dir(appname: str = 'jtui') -> str:
    if 'XDG_STATE_HOME' in os.environ:
        statehome = os.environ['XDG_STATE_HOME']
    else:
        statehome = os.path.join(str(pathlib.Path.home()), '.local', 'state')
    statedir = os.path.join(statehome, appname)
    pathlib.Path(statedir).mkdir(parents=True, exist_ok=True)
    return statedir


def get_logfile() -> str:
    config = get_main_config()
    logfile = config.get('logfile')
    if logfile:
        return os.path.expanduser(logfile)
    return os.path.join(get_state_dir(), 'jtui.log')


def get_jira_session(conn: Connection) -> requests.Session:
    session = requests.session()
    session.headers.update({
        'User-Agent': 'jtui/%s' % __VERSION__,
        'Accept': 'application/json',
    })
    session.auth = (conn.email, conn.token)
    logger.debug('jira url=%s', conn.base_url)
    return session


def format_duration(seconds: Union[int, float]) -> str:
    """Render a number of seconds the way Jira shows logged time.

    - 5400 -> "1h 30m"
    - 7200 -> "2h"
    - 2700 -> "45m"
    """
    hours = int(seconds) // 3600
    minutes = (int(seconds) % 3600) // 60
    if not hours:
        return f'{minutes}m'
    if not minutes:
        return f'{hours}h'
    return f'{hours}h {minutes}m'
