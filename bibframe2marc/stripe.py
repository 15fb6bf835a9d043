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
Striping: write the graph of one description as a tree of alternating
resource and property elements (striped RDF/XML), which is what the record
stylesheet is written against.

    <rdf:RDF>
      <rdf:Description rdf:about="http://example.org/work/1">
        <rdf:type rdf:resource="http://id.loc.gov/ontologies/bibframe/Work"/>
        <bf:hasInstance>
          <rdf:Description rdf:about="http://example.org/instance/1">
            ...
            <bf:instanceOf rdf:resource="http://example.org/work/1"/>
          </rdf:Description>
        </bf:hasInstance>
      </rdf:Description>
      <rdf:Description rdf:about="http://example.org/instance/1">
        ...
      </rdf:Description>
    </rdf:RDF>

The top level holds the work, the instance and the items of a description, in
this order. A node already being expanded further up is not expanded again,
the property gets an rdf:resource (or, for blank nodes, an rdf:nodeID naming
the ancestor) instead. Blank nodes carry an rdf:nodeID numbered in document
order, so the output does not depend on blank node labels of the parser.
Properties are ordered by predicate IRI, objects of one predicate by content.
"""

import logging

from lxml import etree
from rdflib import RDF, RDFS, BNode, Literal, URIRef
from rdflib.namespace import split_uri

from bibframe2marc.errors import StripingError

logger = logging.getLogger('bibframe2marc')

RDF_NS = str(RDF)
XML_NS = 'http://www.w3.org/XML/1998/namespace'

NSMAP = {
    'rdf': RDF_NS,
    'rdfs': str(RDFS),
    'bf': 'http://id.loc.gov/ontologies/bibframe/',
    'bflc': 'http://id.loc.gov/ontologies/bflc/',
    'madsrdf': 'http://www.loc.gov/mads/rdf/v1#',
}

RDF_RDF = '{%s}RDF' % RDF_NS
RDF_DESCRIPTION = '{%s}Description' % RDF_NS
RDF_TYPE = '{%s}type' % RDF_NS
RDF_ABOUT = '{%s}about' % RDF_NS
RDF_NODEID = '{%s}nodeID' % RDF_NS
RDF_RESOURCE = '{%s}resource' % RDF_NS
RDF_DATATYPE = '{%s}datatype' % RDF_NS
XML_LANG = '{%s}lang' % XML_NS

# Tags of the intermediate tree.
LITERAL, REFERENCE, BLANK_REFERENCE, RESOURCE = 'literal', 'reference', 'blank-reference', 'resource'


def split_predicate(predicate):
    """
    Split a predicate IRI into namespace and local name, raise StripingError,
    if the IRI has no local part usable as an XML name.
    """
    try:
        return split_uri(predicate)
    except ValueError:
        raise StripingError('cannot use predicate as XML element name: %s' % predicate) from None


def sort_key(item):
    """ Literals first, then by content. """
    _, node = item
    return (node[0] != LITERAL, node)


class Striper(object):
    """
    Expand nodes of a graph into nested tuples:

        (LITERAL, text, lang, datatype)
        (REFERENCE, iri)
        (BLANK_REFERENCE, depth)
        (RESOURCE, iri, (type, ...), ((predicate, node), ...))

    A blank resource has an empty iri. A blank reference points to the
    ancestor at the given depth of the current expansion path. The tuples
    carry no blank node labels and compare by content, which gives a stable
    order for objects.
    """

    def __init__(self, graph):
        self.graph = graph
        self.stack = []
        self.expanding = {}

    def has_properties(self, node):
        for _ in self.graph.predicate_objects(node):
            return True
        return False

    def expand(self, node):
        """ Expand a resource node, the node is on the stack meanwhile. """
        iri = '' if isinstance(node, BNode) else str(node)

        self.expanding[node] = len(self.stack)
        self.stack.append(node)
        try:
            types = tuple(sorted(str(t) for t in self.graph.objects(node, RDF.type)))
            properties = []
            for predicate in sorted({p for p in self.graph.predicates(node) if p != RDF.type}, key=str):
                split_predicate(predicate)
                objects = [(str(predicate), self.value(o)) for o in self.graph.objects(node, predicate)]
                properties.extend(sorted(objects, key=sort_key))
        finally:
            self.stack.pop()
            del self.expanding[node]

        return (RESOURCE, iri, types, tuple(properties))

    def value(self, obj):
        if isinstance(obj, Literal):
            return (LITERAL, str(obj), obj.language or '', str(obj.datatype or ''))
        if obj in self.expanding:
            if isinstance(obj, BNode):
                return (BLANK_REFERENCE, self.expanding[obj])
            return (REFERENCE, str(obj))
        if isinstance(obj, URIRef) and not self.has_properties(obj):
            return (REFERENCE, str(obj))
        return self.expand(obj)


def namespaces(nodes, nsmap=None):
    """
    Collect the predicate namespaces used in the expanded nodes and return a
    namespace map: known prefixes plus ns1, ns2, ... for the rest, sorted.
    """
    nsmap = dict(nsmap or NSMAP)
    known = set(nsmap.values())
    found = set()
    pending = list(nodes)
    while pending:
        node = pending.pop()
        if node[0] != RESOURCE:
            continue
        for predicate, child in node[3]:
            found.add(split_predicate(predicate)[0])
            pending.append(child)
    for i, namespace in enumerate(sorted(found - known), start=1):
        nsmap['ns%d' % i] = namespace
    return nsmap


class Renderer(object):
    """
    Write expanded nodes as elements. Blank resources are numbered b0, b1,
    ... in document order, so every blank resource element has its own
    rdf:nodeID and a blank reference names exactly one ancestor.
    """

    def __init__(self):
        self.counter = 0
        self.path = []

    def property(self, parent, predicate, node):
        namespace, local = split_predicate(predicate)
        prop = etree.SubElement(parent, '{%s}%s' % (namespace, local))
        kind = node[0]
        if kind == LITERAL:
            _, text, lang, datatype = node
            prop.text = text
            if lang:
                prop.set(XML_LANG, lang)
            elif datatype:
                prop.set(RDF_DATATYPE, datatype)
        elif kind == REFERENCE:
            prop.set(RDF_RESOURCE, node[1])
        elif kind == BLANK_REFERENCE:
            prop.set(RDF_NODEID, self.path[node[1]])
        else:
            self.resource(prop, node)

    def resource(self, parent, node):
        _, iri, types, properties = node
        el = etree.SubElement(parent, RDF_DESCRIPTION)
        if iri:
            el.set(RDF_ABOUT, iri)
            self.path.append(None)
        else:
            nodeid = 'b%d' % self.counter
            self.counter += 1
            el.set(RDF_NODEID, nodeid)
            self.path.append(nodeid)
        try:
            for t in types:
                etree.SubElement(el, RDF_TYPE).set(RDF_RESOURCE, t)
            for predicate, child in properties:
                self.property(el, predicate, child)
        finally:
            self.path.pop()
        return el


def stripe(description, graph):
    """
    Return the striped document (an lxml ElementTree) for a description and
    its graph. Raises StripingError, if the graph cannot be written as XML.
    """
    striper = Striper(graph)
    try:
        nodes = [striper.expand(root) for root in description.roots]
        root = etree.Element(RDF_RDF, nsmap=namespaces(nodes))
        renderer = Renderer()
        for node in nodes:
            renderer.resource(root, node)
    except StripingError as exc:
        exc.description = description
        raise
    except ValueError as exc:
        raise StripingError('cannot write striped XML: %s' % exc, description=description) from exc
    logger.debug('[%s] striped %d top level resources', description, len(nodes))
    return etree.ElementTree(root)


def tostring(document):
    """ Serialize a striped document, UTF-8 with XML declaration. """
    return etree.tostring(document, xml_declaration=True, encoding='UTF-8', pretty_print=True)
