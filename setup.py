#!/usr/bin/env python3

import os
import re
from setuptools import setup


def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


def find_version(source):
    version_file = read(source)
    version_match = re.search(r"^__VERSION__ = ['\"]([^'\"]*)['\"]", version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


NAME = 'jtui'

setup(
    version=find_version('jtui/__init__.py'),
    name=NAME,
    description='A terminal client for Jira boards, backlogs and worklogs',
    packages=['jtui', 'jtui.tui'],
    license='GPLv2+',
    long_description=read('README.rst'),
    long_description_content_type='text/x-rst',
    keywords=['jira', 'tui', 'worklog', 'terminal'],
    install_requires=[
        'requests>=2.24,<3.0',
        'textual>=0.80',
        'rich>=13.0',
        'python-dotenv>=1.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'pytest-asyncio>=0.21',
        ],
    },
    python_requires='>=3.9',
    entry_points={
        'console_scripts': [
            'jtui=jtui.command:cmd'
        ],
    },
)
