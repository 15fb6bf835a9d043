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
Assemble MARC records from MARC-shaped XML documents and write them out, as
MARCXML collection or as binary MARC (ISO 2709).

Text is normalized to Unicode NFC before a record is built, so the same input
always yields the same bytes.
"""

import copy
import io
import logging
import re
import unicodedata

import pymarc
from pymarc import Field, Subfield

from bibframe2marc.errors import ConfigurationError, RecordError
from bibframe2marc.transform import MARC_COLLECTION, MARC_NS, MARC_RECORD

logger = logging.getLogger('bibframe2marc')

MARC_LEADER = '{%s}leader' % MARC_NS
MARC_CONTROLFIELD = '{%s}controlfield' % MARC_NS
MARC_DATAFIELD = '{%s}datafield' % MARC_NS
MARC_SUBFIELD = '{%s}subfield' % MARC_NS

DEFAULT_LEADER = '     nam a2200000 i 4500'

OUTPUT_FORMATS = ('marcxml', 'marc')

control_tag_p = re.compile(r'^00[1-9]$')
data_tag_p = re.compile(r'^(0[1-9][0-9A-Za-z]|[1-9A-Za-z][0-9A-Za-z]{2})$')


def normalize(document):
    """
    Return a copy of the document with all text and attribute values in NFC.
    """
    root = document.getroot() if hasattr(document, 'getroot') else document
    root = copy.deepcopy(root)
    for el in root.iter():
        if el.text:
            el.text = unicodedata.normalize('NFC', el.text)
        if el.tail:
            el.tail = unicodedata.normalize('NFC', el.tail)
        for key, value in el.attrib.items():
            el.set(key, unicodedata.normalize('NFC', value))
    return root


def _indicator(el, name):
    value = el.get(name)
    if value is None:
        return ' '
    if len(value) != 1:
        raise RecordError('%s on %s must be a single character, got %r' % (name, el.get('tag'), value))
    return value


def build_record(document):
    """
    Build a pymarc.Record from a MARC-shaped XML document (marc:record root,
    or a marc:collection holding exactly one record). Raise RecordError, if
    the document is structurally invalid.
    """
    root = normalize(document)
    if root.tag == MARC_COLLECTION:
        records = root.findall(MARC_RECORD)
        if len(records) != 1:
            raise RecordError('collection must hold exactly one record, found %d' % len(records))
        root = records[0]
    if root.tag != MARC_RECORD:
        raise RecordError('not a MARC record: %s' % root.tag)

    leader = root.findtext(MARC_LEADER)
    if leader is None:
        leader = DEFAULT_LEADER
    if len(leader) != 24:
        raise RecordError('leader must have 24 characters, got %d: %r' % (len(leader), leader))

    record = pymarc.Record(force_utf8=True, leader=leader)

    for el in root:
        if not isinstance(el.tag, str) or el.tag == MARC_LEADER:
            continue
        if el.tag == MARC_CONTROLFIELD:
            tag = el.get('tag', '')
            if not control_tag_p.match(tag):
                raise RecordError('invalid control field tag: %r' % tag)
            record.add_field(Field(tag=tag, data=el.text or ''))
        elif el.tag == MARC_DATAFIELD:
            tag = el.get('tag', '')
            if not data_tag_p.match(tag):
                raise RecordError('invalid data field tag: %r' % tag)
            indicators = [_indicator(el, 'ind1'), _indicator(el, 'ind2')]
            subfields = []
            for sf in el:
                if not isinstance(sf.tag, str):
                    continue
                if sf.tag != MARC_SUBFIELD:
                    raise RecordError('unexpected element in %s: %s' % (tag, sf.tag))
                code = sf.get('code', '')
                if len(code) != 1 or code.isspace():
                    raise RecordError('invalid subfield code in %s: %r' % (tag, code))
                subfields.append(Subfield(code=code, value=sf.text or ''))
            if not subfields:
                raise RecordError('data field %s has no subfields' % tag)
            record.add_field(Field(tag=tag, indicators=indicators, subfields=subfields))
        else:
            raise RecordError('unexpected element in record: %s' % el.tag)

    if not record.fields:
        raise RecordError('record has no fields')
    return record


class Collection(object):
    """
    An ordered list of records. Nothing is written until `write` or
    `serialize` is called, so an aborted run can just drop the collection.
    """

    def __init__(self, records=None):
        self.records = list(records or [])

    def __iter__(self):
        return iter(self.records)

    def __len__(self):
        return len(self.records)

    def append(self, record):
        self.records.append(record)


def assemble(documents):
    """
    Build a collection from MARC-shaped documents. Invalid documents are
    dropped with a warning.
    """
    collection = Collection()
    for i, document in enumerate(documents):
        try:
            collection.append(build_record(document))
        except RecordError as exc:
            logger.warning('dropping document %d: %s', i, exc)
    return collection


def check_output_format(target_format):
    if target_format not in OUTPUT_FORMATS:
        raise ConfigurationError('unknown output format: %s, use one of: %s' % (
            target_format, ', '.join(OUTPUT_FORMATS)))
    return target_format


def write(collection, stream, target_format='marcxml'):
    """
    Write the collection to a binary stream. The stream is not closed.
    """
    check_output_format(target_format)
    if target_format == 'marcxml':
        writer = pymarc.XMLWriter(stream)
    else:
        writer = pymarc.MARCWriter(stream)
    for record in collection:
        writer.write(record)
    writer.close(close_fh=False)


def serialize(collection, target_format='marcxml'):
    """
    Return the collection as bytes, MARCXML collection or binary MARC.
    """
    buf = io.BytesIO()
    write(collection, buf, target_format=target_format)
    return buf.getvalue()

