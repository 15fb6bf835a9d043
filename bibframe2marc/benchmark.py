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
Timing helpers. Usage:

    @timed
    def convert(self, store):
        ...

Logs the elapsed time at debug level, slow calls at info level.
"""

import functools
import logging
from timeit import default_timer

logger = logging.getLogger('bibframe2marc')


class Timer(object):
    """ A timer as a context manager, measures wall clock time. """

    def __init__(self):
        self.timer = default_timer
        self.start = self.end = None
        self.elapsed_s = 0.0

    def __enter__(self):
        self.start = self.timer()
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.end = self.timer()
        self.elapsed_s = self.end - self.start


def timed(method=None, slow=10.0):
    """
    A @timed decorator, works on functions and methods. Calls taking longer
    than `slow` seconds are logged at info level.
    """
    if method is None:
        return functools.partial(timed, slow=slow)

    @functools.wraps(method)
    def _timed(*args, **kwargs):
        with Timer() as timer:
            result = method(*args, **kwargs)
        msg = '[%s] %0.5f' % (method.__qualname__, timer.elapsed_s)
        if timer.elapsed_s > slow:
            logger.info('%s (slow)', msg)
        else:
            logger.debug(msg)
        return result
    return _timed
