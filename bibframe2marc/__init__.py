# coding: utf-8
# pylint: disable=C0103,C0301

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
Define version and ensure the temporary directory configured in the ini file
is used.

The conversion pipeline, in order:

    graph.GraphStore -> extract.extract -> dereference.resolve ->
    stripe.stripe -> transform.Transformer -> marc.assemble

See conversions.convert for the function wiring these together.
"""

import tempfile

from bibframe2marc.configuration import Config

__version__ = '0.1.0'

config = Config.instance()
tempfile.tempdir = config.get('core', 'tempdir', fallback=tempfile.gettempdir())
