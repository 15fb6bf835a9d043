# coding: utf-8
# pylint: disable=C0103,C0301,W0703

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
The graph store: an in-memory rdflib graph, populated from files, URLs or
standard input, then frozen for the conversion phase.

    store = GraphStore()
    store.load(["a.rdf", "http://example.org/b.ttl"], informat="rdfxml")
    store.freeze()

Supported input formats are listed in FORMATS, keys are the names used on the
command line. RDF/JSON (application/rdf+json) is not built into rdflib, so it
is parsed here.
"""

import json
import logging
import select
import sys
from urllib.parse import urlparse

import backoff
import requests
from rdflib import BNode, Dataset, Graph, Literal, URIRef

from bibframe2marc import __version__
from bibframe2marc.benchmark import timed
from bibframe2marc.errors import ConfigurationError, SourceError

logger = logging.getLogger('bibframe2marc')

RDFJSON = 'rdfjson'

# Command line format name -> rdflib parser name.
FORMATS = {
    'rdfxml': 'xml',
    'ntriples': 'nt',
    'turtle': 'turtle',
    'rdfjson': RDFJSON,
    'nquads': 'nquads',
    'jsonld': 'json-ld',
}

# Response content type -> command line format name.
CONTENT_TYPES = {
    'application/rdf+xml': 'rdfxml',
    'application/xml': 'rdfxml',
    'text/xml': 'rdfxml',
    'application/n-triples': 'ntriples',
    'text/plain': 'ntriples',
    'text/turtle': 'turtle',
    'application/x-turtle': 'turtle',
    'application/rdf+json': 'rdfjson',
    'application/n-quads': 'nquads',
    'application/ld+json': 'jsonld',
}

ACCEPT = ', '.join((
    'application/rdf+xml',
    'text/turtle;q=0.9',
    'application/n-triples;q=0.8',
    'application/ld+json;q=0.7',
    'application/rdf+json;q=0.6',
    'application/n-quads;q=0.5',
))


def check_format(informat):
    """
    Return the rdflib parser name for a format name or raise a
    ConfigurationError.
    """
    try:
        return FORMATS[informat]
    except KeyError:
        raise ConfigurationError('unknown input format: %s, use one of: %s' % (
            informat, ', '.join(sorted(FORMATS)))) from None


def format_from_content_type(content_type):
    """
    Map a HTTP Content-Type header value to a format name, None if unknown.

    >>> format_from_content_type("text/turtle; charset=utf-8")
    'turtle'
    """
    if not content_type:
        return None
    mimetype = content_type.split(';')[0].strip().lower()
    return CONTENT_TYPES.get(mimetype)


def is_url(source):
    """ True, if source looks like something we can fetch over HTTP. """
    return urlparse(source).scheme in ('http', 'https')


def parse_rdfjson(graph, data):
    """
    Parse RDF/JSON (https://www.w3.org/TR/rdf-json/) into graph. Blank node
    labels are scoped to this document.
    """
    if isinstance(data, bytes):
        data = data.decode('utf-8')
    doc = json.loads(data)
    if not isinstance(doc, dict):
        raise ValueError('RDF/JSON document must be an object')

    bnodes = {}

    def resource(value):
        if value.startswith('_:'):
            return bnodes.setdefault(value, BNode())
        return URIRef(value)

    for s, properties in doc.items():
        subject = resource(s)
        for p, objects in properties.items():
            for obj in objects:
                kind = obj.get('type')
                if kind == 'uri':
                    o = URIRef(obj['value'])
                elif kind == 'bnode':
                    o = resource(obj['value'])
                elif kind == 'literal':
                    datatype = obj.get('datatype')
                    o = Literal(obj['value'], lang=obj.get('lang'),
                                datatype=URIRef(datatype) if datatype else None)
                else:
                    raise ValueError('invalid RDF/JSON object type: %s' % kind)
                graph.add((subject, URIRef(p), o))
    return graph


def parse_data(data, informat='rdfxml', base=None):
    """
    Parse a string or bytes in the given format into a new graph. Quads are
    flattened into triples, graph names are dropped. Empty or blank input
    yields an empty graph.
    """
    fmt = check_format(informat)
    graph = Graph()
    if not data.strip():
        return graph
    if fmt == RDFJSON:
        return parse_rdfjson(graph, data)
    if fmt == 'nquads':
        ds = Dataset()
        ds.parse(data=data, format=fmt, publicID=base)
        for s, p, o, _ in ds.quads((None, None, None, None)):
            graph.add((s, p, o))
        return graph
    graph.parse(data=data, format=fmt, publicID=base)
    return graph


def read_stdin(stream=None, wait=2.0):
    """
    Read all of stream (default: standard input), but only if something
    becomes readable within `wait` seconds. Otherwise raise a SourceError.
    """
    if stream is None:
        stream = sys.stdin.buffer
    ready, _, _ = select.select([stream], [], [], wait)
    if not ready:
        raise SourceError('no input given and nothing on stdin after %ss' % wait)
    return stream.read()


class GraphStore(object):
    """
    Holds all triples of a run. After `freeze` the store is read-only, all
    conversions read from it, none writes to it.
    """

    def __init__(self, session=None, max_tries=3, timeout=60):
        self.graph = Graph()
        self.frozen = False
        self.sess = session or requests.session()
        self.sess.headers.update({'User-Agent': 'bibframe2marc/%s' % __version__})
        self.max_tries = max_tries
        self.timeout = timeout

    def __len__(self):
        return len(self.graph)

    def __contains__(self, triple):
        return triple in self.graph

    def _check_writable(self):
        if self.frozen:
            raise RuntimeError('graph store is frozen')

    def freeze(self):
        """ Mark the store read-only. """
        self.frozen = True
        logger.debug('graph store frozen with %d triples', len(self.graph))
        return self

    def add(self, triple):
        self._check_writable()
        self.graph.add(triple)

    def merge(self, graph):
        """ Add all triples of another graph. """
        self._check_writable()
        for triple in graph:
            self.graph.add(triple)

    def triples(self, pattern):
        return self.graph.triples(pattern)

    def query(self, query, **bindings):
        """ Run a SPARQL query with optional initial bindings. """
        return self.graph.query(query, initBindings=bindings or None)

    def parse(self, data, informat='rdfxml', base=None, name='<data>'):
        """
        Parse data into the store. Nothing is added if parsing fails.
        """
        self._check_writable()
        check_format(informat)
        try:
            graph = parse_data(data, informat=informat, base=base)
        except Exception as exc:
            raise SourceError('cannot parse %s as %s: %s' % (name, informat, exc)) from exc
        self.merge(graph)
        logger.debug('loaded %d triples from %s (%s)', len(graph), name, informat)
        return len(graph)

    def load_file(self, path, informat='rdfxml'):
        try:
            with open(path, 'rb') as handle:
                data = handle.read()
        except OSError as exc:
            raise SourceError('cannot read %s: %s' % (path, exc)) from exc
        return self.parse(data, informat=informat, name=path)

    def fetch(self, url):
        """
        GET a URL with RDF content negotiation. Connection errors are retried,
        HTTP errors are not.
        """

        @backoff.on_exception(backoff.expo, requests.exceptions.ConnectionError, max_tries=self.max_tries)
        def fetch(url):
            return self.sess.get(url, headers={'Accept': ACCEPT}, timeout=self.timeout)

        try:
            r = fetch(url)
        except requests.exceptions.RequestException as exc:
            raise SourceError('cannot fetch %s: %s' % (url, exc)) from exc
        if r.status_code >= 400:
            raise SourceError('%s on %s' % (r.status_code, url))
        return r

    def load_url(self, url, informat='rdfxml'):
        """
        Load a URL. The parser is picked from the response content type; if
        that is unknown or parsing fails, the body is parsed once more with
        the declared format. If that fails as well, a SourceError is raised.
        """
        check_format(informat)
        r = self.fetch(url)
        negotiated = format_from_content_type(r.headers.get('Content-Type'))
        if negotiated is not None:
            try:
                return self.parse(r.content, informat=negotiated, base=url, name=url)
            except SourceError as exc:
                if negotiated == informat:
                    raise
                logger.warning('%s, retrying as %s', exc, informat)
        return self.parse(r.content, informat=informat, base=url, name=url)

    def load_stdin(self, informat='rdfxml', stream=None, wait=2.0):
        data = read_stdin(stream=stream, wait=wait)
        return self.parse(data, informat=informat, name='<stdin>')

    @timed
    def load(self, sources, informat='rdfxml', stream=None, wait=2.0):
        """
        Load zero or more sources (paths or URLs). With no sources, read from
        standard input. Return the number of triples in the store.
        """
        check_format(informat)
        if not sources:
            self.load_stdin(informat=informat, stream=stream, wait=wait)
        for source in sources:
            if is_url(source):
                self.load_url(source, informat=informat)
            else:
                self.load_file(source, informat=informat)
        return len(self.graph)
