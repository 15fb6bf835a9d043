# coding: utf-8
# pylint: disable=C0103,W0232,C0301,W0703

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
The conversion pipeline. This module wires the stages together and keeps the
per description error handling in one place:

    store -> extract -> [subgraph -> resolve -> stripe -> transform ->
    build_record] per description -> collection

Each description yields a Result. Whatever goes wrong inside a description
is logged and turned into a failed result, it never stops the run. Errors
before the descriptions are known (bad configuration, query failure) are
raised.
"""

import collections
import logging

from bibframe2marc.benchmark import timed
from bibframe2marc.configuration import DereferenceConfig
from bibframe2marc.dereference import resolve
from bibframe2marc.errors import DescriptionError
from bibframe2marc.extract import DEFAULT_DEPTH, extract, subgraph
from bibframe2marc.marc import Collection, build_record
from bibframe2marc.stripe import stripe
from bibframe2marc.transform import Transformer

logger = logging.getLogger('bibframe2marc')

CONVERTED = 'converted'
EMPTY = 'empty'
FAILED = 'failed'


class Result(collections.namedtuple('Result', 'description status record reason')):
    """
    Outcome for one description: converted (with record), empty (there is
    legitimately no record) or failed (with reason).
    """
    __slots__ = ()

    @property
    def ok(self):
        return self.status != FAILED


class Report(object):
    """
    Results of a run, in extraction order, and the collection of converted
    records.
    """

    def __init__(self):
        self.results = []
        self.collection = Collection()
        self.stats = collections.Counter()

    def add(self, result):
        self.results.append(result)
        self.stats[result.status] += 1
        if result.status == CONVERTED:
            self.collection.append(result.record)

    @property
    def exit_status(self):
        """
        0, unless at least one description failed and none was converted,
        then 2.
        """
        if self.stats[FAILED] > 0 and self.stats[CONVERTED] == 0:
            return 2
        return 0

    def summary(self):
        return '%d descriptions: %d converted, %d empty, %d failed' % (
            len(self.results), self.stats[CONVERTED], self.stats[EMPTY], self.stats[FAILED])


class Converter(object):
    """
    Converts descriptions of a frozen graph store. The dereference
    configuration is passed in and never changed.

        converter = Converter(dereference=load_dereference_config("deref.json"))
        report = converter.convert(store)
        marc.write(report.collection, sys.stdout.buffer)
    """

    def __init__(self, transformer=None, dereference=None, fetch=None, depth=DEFAULT_DEPTH):
        self.transformer = transformer or Transformer()
        self.dereference = dereference or DereferenceConfig()
        self.fetch = fetch
        self.depth = depth

    def convert_description(self, store, description):
        """
        Run one description through the pipeline. Never raises.
        """
        try:
            view = subgraph(store, description, depth=self.depth)
            view = resolve(view, description, self.dereference, fetch=self.fetch)
            striped = stripe(description, view)
            document = self.transformer(striped, description=description)
            if document is None:
                logger.info('[%s] no record', description)
                return Result(description, EMPTY, None, 'no record produced')
            record = build_record(document)
        except DescriptionError as exc:
            logger.warning('[%s] skipped, %s: %s', description, exc.__class__.__name__, exc)
            return Result(description, FAILED, None, str(exc))
        except Exception as exc:
            logger.warning('[%s] skipped, unexpected %s: %s', description, exc.__class__.__name__, exc)
            logger.debug('traceback', exc_info=True)
            return Result(description, FAILED, None, str(exc))
        return Result(description, CONVERTED, record, None)

    @timed
    def convert(self, store, descriptions=None):
        """
        Convert all descriptions of the store, or the ones given. Return a
        Report. Raises ExtractionError, if descriptions cannot be found.
        """
        if descriptions is None:
            descriptions = extract(store)
        report = Report()
        for description in descriptions:
            report.add(self.convert_description(store, description))
        logger.info(report.summary())
        return report


def convert(store, transformer=None, dereference=None, fetch=None, depth=DEFAULT_DEPTH):
    """ Shortcut for Converter(...).convert(store). """
    converter = Converter(transformer=transformer, dereference=dereference, fetch=fetch, depth=depth)
    return converter.convert(store)
