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
Dereference selected external resources before striping.

For a description, every triple whose subject has a type listed in the
dereference configuration and whose object is an IRI starting with one of the
prefixes configured for that type is looked up. The triples returned are
merged into a copy of the description graph, so other descriptions (and the
graph store) never see them.

A failed lookup is logged and otherwise ignored, the object stays an opaque
IRI.
"""

import collections
import logging
import time

import requests
from rdflib import RDF, BNode, Graph, URIRef

from bibframe2marc import __version__
from bibframe2marc.errors import DereferenceError
from bibframe2marc.graph import ACCEPT, format_from_content_type, parse_data

logger = logging.getLogger('bibframe2marc')

DEFAULT_TIMEOUT = 10
CHUNK_SIZE = 16384

clock = time.monotonic


class Fetcher(object):
    """
    Fetch an IRI and parse the response into a graph. Every failure
    (connection, timeout, HTTP status >= 400, unparsable body) is raised as
    DereferenceError. No retries.

    The timeout bounds the whole lookup: requests only limits connect and
    single socket reads, so the body is streamed and abandoned once the
    deadline has passed.
    """

    def __init__(self, session=None, timeout=DEFAULT_TIMEOUT, user_agent=None):
        self.sess = session or requests.session()
        self.timeout = timeout
        self.headers = {
            'Accept': ACCEPT,
            'User-Agent': user_agent or 'bibframe2marc/%s' % __version__,
        }

    def read(self, iri):
        """ Return content type and body, raise DereferenceError on failure. """
        deadline = clock() + self.timeout
        try:
            with self.sess.get(str(iri), headers=self.headers, timeout=self.timeout, stream=True) as r:
                if r.status_code >= 400:
                    raise DereferenceError('%s on %s' % (r.status_code, iri))
                chunks = []
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    chunks.append(chunk)
                    if clock() > deadline:
                        raise DereferenceError('lookup of %s took longer than %ss' % (iri, self.timeout))
                return r.headers.get('Content-Type'), b''.join(chunks)
        except requests.exceptions.RequestException as exc:
            raise DereferenceError('lookup of %s failed: %s' % (iri, exc)) from exc

    def __call__(self, iri):
        content_type, body = self.read(iri)
        informat = format_from_content_type(content_type) or 'rdfxml'
        try:
            return parse_data(body, informat=informat, base=str(iri))
        except Exception as exc:
            raise DereferenceError('cannot parse %s as %s: %s' % (iri, informat, exc)) from exc


def reachable(graph, roots):
    """
    Yield nodes reachable from roots (roots included), breadth first, each
    once.
    """
    seen = set(roots)
    queue = collections.deque(roots)
    while queue:
        node = queue.popleft()
        yield node
        for o in sorted(graph.objects(node, None), key=str):
            if isinstance(o, (URIRef, BNode)) and o not in seen:
                seen.add(o)
                queue.append(o)


def candidates(graph, description, config):
    """
    Return the IRIs to dereference for a description, in discovery order,
    without duplicates.
    """
    found = collections.OrderedDict()
    for node in reachable(graph, description.roots):
        types = [t for t in graph.objects(node, RDF.type) if t in config]
        if not types:
            continue
        objects = (o for o in graph.objects(node, None) if isinstance(o, URIRef))
        for o in sorted(objects, key=str):
            if any(config.matches(t, o) for t in types):
                found[o] = True
    return list(found)


def copy_graph(graph):
    copy = Graph()
    for prefix, namespace in graph.namespaces():
        copy.bind(prefix, namespace, override=False)
    for triple in graph:
        copy.add(triple)
    return copy


def resolve(graph, description, config, fetch=None):
    """
    Return the description graph augmented by dereferenced resources. With an
    empty or missing config, the graph is returned as is. Otherwise the result
    is a new graph, the input graph is not modified.

    `fetch` is a callable taking an IRI and returning a graph or raising
    DereferenceError, defaults to a Fetcher.
    """
    if not config:
        return graph
    iris = candidates(graph, description, config)
    if not iris:
        return graph

    if fetch is None:
        fetch = Fetcher()

    augmented = copy_graph(graph)
    for iri in iris:
        try:
            fetched = fetch(iri)
        except DereferenceError as exc:
            logger.warning('[%s] dereference failed: %s', description, exc)
            continue
        for triple in fetched:
            augmented.add(triple)
        logger.debug('[%s] merged %d triples from %s', description, len(fetched), iri)
    return augmented
