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
Apply the record stylesheet (XSLT 1.0) to a striped document.

The stylesheet is data: the default lives in assets/bibframe2marc.xsl, any
other can be passed in. It is expected to produce a single marc:record, a
marc:collection with one record, or nothing at all, which means there is no
record for this description.
"""

import logging
import os

from lxml import etree

from bibframe2marc.errors import ConfigurationError, ConversionError
from bibframe2marc.stripe import RDF_DESCRIPTION, RDF_RDF

logger = logging.getLogger('bibframe2marc')

MARC_NS = 'http://www.loc.gov/MARC21/slim'
MARC_RECORD = '{%s}record' % MARC_NS
MARC_COLLECTION = '{%s}collection' % MARC_NS


def assets(path):
    """
    Return the absolute path to the asset. `path` is the relative path below
    the assets root dir.
    """
    return os.path.join(os.path.dirname(__file__), 'assets', path)


DEFAULT_STYLESHEET = assets('bibframe2marc.xsl')


def check_shape(document):
    """
    A striped document has an rdf:RDF root with at least a work and an
    instance rdf:Description below it, and nothing else.
    """
    root = document.getroot() if hasattr(document, 'getroot') else document
    if root is None or root.tag != RDF_RDF:
        raise ConversionError('striped document must have an rdf:RDF root, got %s' % getattr(root, 'tag', None))
    children = [child for child in root if isinstance(child.tag, str)]
    if len(children) < 2:
        raise ConversionError('striped document needs a work and an instance, found %d resources' % len(children))
    for child in children:
        if child.tag != RDF_DESCRIPTION:
            raise ConversionError('unexpected top level element: %s' % child.tag)


class Transformer(object):
    """
    Wraps a compiled stylesheet. Calling it with a striped document returns
    an ElementTree rooted at marc:record or None.
    """

    def __init__(self, stylesheet=None):
        self.stylesheet = stylesheet or DEFAULT_STYLESHEET
        try:
            self.xslt = etree.XSLT(etree.parse(self.stylesheet))
        except (OSError, etree.LxmlError) as exc:
            raise ConfigurationError('cannot load stylesheet %s: %s' % (self.stylesheet, exc)) from exc
        logger.debug('using stylesheet %s', self.stylesheet)

    def __call__(self, document, description=None):
        try:
            check_shape(document)
        except ConversionError as exc:
            exc.description = description
            raise

        try:
            result = self.xslt(document)
        except etree.XSLTApplyError as exc:
            messages = '; '.join(entry.message for entry in self.xslt.error_log) or str(exc)
            raise ConversionError('transform failed: %s' % messages, description=description) from exc

        root = result.getroot()
        if root is None:
            return None
        if root.tag == MARC_COLLECTION:
            records = root.findall(MARC_RECORD)
            if not records:
                return None
            if len(records) > 1:
                raise ConversionError('transform produced %d records, expected one' % len(records), description=description)
            return etree.ElementTree(records[0])
        if root.tag != MARC_RECORD:
            raise ConversionError('transform produced %s, expected a MARC record' % root.tag, description=description)
        return result


_default = None


def transform(document, transformer=None):
    """
    Transform a striped document with the given or the default transformer.
    Return a MARC-shaped ElementTree or None.
    """
    global _default
    if transformer is None:
        if _default is None:
            _default = Transformer()
        transformer = _default
    return transformer(document)
