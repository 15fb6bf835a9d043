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
Find descriptions in a graph. A description is a Work/Instance pair, the items
of the instance and everything reachable from these, up to a fixed depth.

The query lives in queries/descriptions.rq.
"""

import collections
import logging
import os

from rdflib import BNode, Graph, Namespace, URIRef
from rdflib.plugins.sparql import prepareQuery

from bibframe2marc.benchmark import timed
from bibframe2marc.errors import ExtractionError

logger = logging.getLogger('bibframe2marc')

BF = Namespace('http://id.loc.gov/ontologies/bibframe/')

DEFAULT_DEPTH = 8


def query_path(name):
    """
    Return the absolute path to a query file below the queries directory.
    """
    return os.path.join(os.path.dirname(__file__), 'queries', name)


def load_query(name):
    with open(query_path(name), encoding='utf-8') as handle:
        return prepareQuery(handle.read())


class Description(collections.namedtuple('Description', 'work instance work_types instance_types items')):
    """
    A Work and an Instance, both required, with their asserted types and the
    items of the instance. Immutable.
    """
    __slots__ = ()

    @property
    def roots(self):
        """ Work, instance and items, in this order. """
        return (self.work, self.instance) + tuple(self.items)

    def __str__(self):
        return 'work=%s instance=%s' % (self.work, self.instance)


def instance_items(graph, instance, query=None):
    """
    Items attached to an instance, via bf:hasItem or bf:itemOf, sorted.
    """
    if query is None:
        query = load_query('items.rq')
    rows = graph.query(query, initBindings={'instance': instance})
    return tuple(sorted((row.item for row in rows), key=str))


def extract(store):
    """
    Return a list of descriptions found in the store (a GraphStore or an
    rdflib Graph). Each work/instance pair appears once, in the order the
    query first binds it. Raises ExtractionError, if the query fails.
    """
    graph = getattr(store, 'graph', store)
    try:
        query, items_query = load_query('descriptions.rq'), load_query('items.rq')
        rows = list(graph.query(query))
    except Exception as exc:
        raise ExtractionError('description query failed: %s' % exc) from exc

    pairs = collections.OrderedDict()
    for row in rows:
        if row.work is None or row.instance is None:
            continue
        types = pairs.setdefault((row.work, row.instance), (set(), set()))
        if row.workType is not None:
            types[0].add(row.workType)
        if row.instanceType is not None:
            types[1].add(row.instanceType)

    try:
        descriptions = [
            Description(work=work,
                        instance=instance,
                        work_types=tuple(sorted(work_types, key=str)),
                        instance_types=tuple(sorted(instance_types, key=str)),
                        items=instance_items(graph, instance, query=items_query))
            for (work, instance), (work_types, instance_types) in pairs.items()
        ]
    except Exception as exc:
        raise ExtractionError('item query failed: %s' % exc) from exc
    if not descriptions:
        logger.info('no descriptions found in %d triples', len(graph))
    else:
        logger.debug('found %d descriptions', len(descriptions))
    return descriptions


def subgraph(store, description, depth=DEFAULT_DEPTH):
    """
    Copy the triples reachable from the description roots, following
    outgoing links breadth first, into a new graph. Nodes more than `depth`
    links away from a root contribute no triples. The returned graph is
    private to the caller, changes do not affect the store.
    """
    view = Graph()
    for prefix, namespace in getattr(store, 'graph', store).namespaces():
        view.bind(prefix, namespace, override=False)

    seen = set(description.roots)
    queue = collections.deque((root, 0) for root in description.roots)
    while queue:
        node, level = queue.popleft()
        if level >= depth:
            continue
        for s, p, o in store.triples((node, None, None)):
            view.add((s, p, o))
            if isinstance(o, (URIRef, BNode)) and o not in seen:
                seen.add(o)
                queue.append((o, level + 1))
    return view
