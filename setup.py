#!/usr/bin/env python
# coding: utf-8

# Copyright 2026 by Leipzig University Library, http://ub.uni-leipzig.de
#                   The Finc Authors, http://finc.info
#
# This file is part of some open source application.
#
# Some open source application is free software: you can redistribute
# it and/or modify it under the terms of the GNU General Public
# License as published by the Free Software Foundation, either
# version 3 of the License, or (at your option) any later version.
#
# Some open source application is distributed in the hope that it will
# be useful, but WITHOUT ANY WARRANTY; without even the implied warranty
# of MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Foobar.  If not, see <http://www.gnu.org/licenses/>.
#
# @license GPL-3.0+ <http://spdx.org/licenses/GPL-3.0+>

"""
bibframe2marc converts BIBFRAME RDF descriptions into MARC records.
"""

import os
import re

from setuptools import setup

# The package imports its dependencies on import, read the version from source.
with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'bibframe2marc', '__init__.py')) as handle:
    __version__ = re.search(r"^__version__ = '([^']+)'", handle.read(), re.M).group(1)

install_requires = [
    'backoff>=1.11.1',
    'lxml>=4.6',
    'pydantic>=2',
    'pymarc>=5',
    'rdflib>=6',
    'requests>=2.26.0',
]

setup(name='bibframe2marc',
      version=__version__,
      description='Convert BIBFRAME RDF to MARC21 records',
      url='https://github.com/ubleipzig/bibframe2marc',
      author='The Finc Authors',
      author_email='team@finc.info',
      packages=[
          'bibframe2marc',
      ],
      package_dir={'bibframe2marc': 'bibframe2marc'},
      package_data={
          'bibframe2marc': [
              'assets/*.xsl',
              'queries/*.rq',
          ]},
      entry_points={
        'console_scripts': [
            'bibframe2marc=bibframe2marc.main:main',
        ],
      },
      install_requires=install_requires,
      extras_require={
          'test': ['pytest', 'responses'],
      },
      zip_safe=False,
      classifiers=[
          'Development Status :: 4 - Beta',
          'Environment :: Console',
          'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
          'Operating System :: POSIX',
          'Programming Language :: Python :: 3',
          'Programming Language :: Python',
          'Topic :: Text Processing',
      ])
