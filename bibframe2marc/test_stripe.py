# coding: utf-8

"""
Tests for striping description graphs.
"""

import pytest
from rdflib import RDF, BNode, Graph, Literal, Namespace, URIRef

from bibframe2marc.errors import StripingError
from bibframe2marc.extract import Description, extract, subgraph
from bibframe2marc.graph import GraphStore, parse_data
from bibframe2marc.stripe import NSMAP, stripe, tostring

BF = Namespace("http://id.loc.gov/ontologies/bibframe/")
EX = Namespace("http://example.org/")

ns = dict(NSMAP)

sample_turtle = """
@prefix bf: <http://id.loc.gov/ontologies/bibframe/> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix ex: <http://example.org/> .

ex:work1 a bf:Work, bf:Text ;
    bf:hasInstance ex:instance1 ;
    bf:subject ex:topic1 ;
    bf:contribution [ a bf:Contribution ; bf:agent [ a bf:Person ; rdfs:label "Doe, Jane" ] ] ,
                    [ a bf:Contribution ; bf:agent [ a bf:Person ; rdfs:label "Roe, Richard" ] ] .

ex:instance1 a bf:Instance ;
    bf:instanceOf ex:work1 ;
    bf:title [ a bf:Title ; bf:mainTitle "Katzen"@de, "Cats"@en ] ;
    bf:copyrightDate "2019"^^<http://www.w3.org/2001/XMLSchema#gYear> .
"""


def description_of(data):
    graph = parse_data(data, "turtle")
    descriptions = extract(graph)
    assert len(descriptions) == 1
    return descriptions[0], subgraph(graph, descriptions[0])


def test_roots_work_then_instance():
    description, graph = description_of(sample_turtle)
    doc = stripe(description, graph)
    assert doc.xpath("/rdf:RDF/rdf:Description/@rdf:about", namespaces=ns) == [
        "http://example.org/work1", "http://example.org/instance1"]


def test_types_and_literals():
    description, graph = description_of(sample_turtle)
    doc = stripe(description, graph)
    instance = doc.xpath("/rdf:RDF/rdf:Description[2]", namespaces=ns)[0]
    assert instance.xpath("rdf:type/@rdf:resource", namespaces=ns) == [str(BF.Instance)]
    titles = instance.xpath("bf:title/rdf:Description/bf:mainTitle", namespaces=ns)
    assert [(t.text, t.get("{http://www.w3.org/XML/1998/namespace}lang")) for t in titles] == [
        ("Cats", "en"), ("Katzen", "de")]
    date = instance.xpath("bf:copyrightDate", namespaces=ns)[0]
    assert date.text == "2019"
    assert date.get("{%s}datatype" % ns["rdf"]) == "http://www.w3.org/2001/XMLSchema#gYear"


def test_predicates_sorted():
    description, graph = description_of(sample_turtle)
    doc = stripe(description, graph)
    work = doc.xpath("/rdf:RDF/rdf:Description[1]", namespaces=ns)[0]
    names = [el.tag for el in work if el.tag != "{%s}type" % ns["rdf"]]
    assert names == sorted(names)


def test_opaque_iri_is_resource_reference():
    description, graph = description_of(sample_turtle)
    doc = stripe(description, graph)
    assert doc.xpath("/rdf:RDF/rdf:Description[1]/bf:subject/@rdf:resource", namespaces=ns) == [
        "http://example.org/topic1"]


def test_cycle_terminates_with_reference():
    description, graph = description_of(sample_turtle)
    doc = stripe(description, graph)
    # work -> hasInstance -> instance -> instanceOf -> work (on stack)
    refs = doc.xpath("/rdf:RDF/rdf:Description[1]/bf:hasInstance/rdf:Description/bf:instanceOf/@rdf:resource",
                     namespaces=ns)
    assert refs == ["http://example.org/work1"]
    # and the other way round, starting from the instance
    refs = doc.xpath("/rdf:RDF/rdf:Description[2]/bf:instanceOf/rdf:Description/bf:hasInstance/@rdf:resource",
                     namespaces=ns)
    assert refs == ["http://example.org/instance1"]


def test_long_cycle_terminates():
    graph = Graph()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.instance1, EX.p, EX.a))
    graph.add((EX.a, EX.p, EX.b))
    graph.add((EX.b, EX.p, EX.instance1))
    description = Description(EX.work1, EX.instance1, (), (), ())
    doc = stripe(description, graph)
    assert doc.xpath("/rdf:RDF/rdf:Description[2]/ex:p/rdf:Description/ex:p/rdf:Description/ex:p/@rdf:resource",
                     namespaces={"rdf": ns["rdf"], "ex": str(EX)}) == [str(EX.instance1)]


def test_blank_node_cycle():
    graph = Graph()
    a, b = BNode(), BNode()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.instance1, EX.p, a))
    graph.add((a, EX.p, b))
    graph.add((b, EX.p, a))
    description = Description(EX.work1, EX.instance1, (), (), ())
    doc = stripe(description, graph)
    inner = doc.xpath("/rdf:RDF/rdf:Description[2]/ex:p/rdf:Description",
                      namespaces={"rdf": ns["rdf"], "ex": str(EX)})[0]
    nodeid = inner.get("{%s}nodeID" % ns["rdf"])
    refs = inner.xpath("ex:p/rdf:Description/ex:p/@rdf:nodeID", namespaces={"rdf": ns["rdf"], "ex": str(EX)})
    assert refs == [nodeid]


def test_named_resource_expanded_again_on_other_path():
    graph = Graph()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.work1, EX.p, EX.shared))
    graph.add((EX.instance1, EX.p, EX.shared))
    graph.add((EX.shared, EX.label, Literal("shared")))
    description = Description(EX.work1, EX.instance1, (), (), ())
    doc = stripe(description, graph)
    labels = doc.xpath("//ex:label", namespaces={"ex": str(EX)})
    # work/p, work/hasInstance/instance/p and instance/p
    assert len(labels) == 3


def test_striping_is_idempotent():
    description, graph = description_of(sample_turtle)
    assert tostring(stripe(description, graph)) == tostring(stripe(description, graph))


def test_independent_of_blank_node_labels():
    first = tostring(stripe(*description_of(sample_turtle)))
    second = tostring(stripe(*description_of(sample_turtle)))
    assert first == second


def test_unknown_namespaces_get_prefixes():
    graph = Graph()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.instance1, URIRef("http://zzz.org/ns#q"), Literal("1")))
    graph.add((EX.instance1, URIRef("http://aaa.org/ns#q"), Literal("2")))
    description = Description(EX.work1, EX.instance1, (), (), ())
    root = stripe(description, graph).getroot()
    assert root.nsmap["ns1"] == "http://aaa.org/ns#"
    assert root.nsmap["ns2"] == "http://zzz.org/ns#"


def test_predicate_without_local_name():
    graph = Graph()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.instance1, URIRef("http://example.org/123"), Literal("x")))
    description = Description(EX.work1, EX.instance1, (), (), ())
    with pytest.raises(StripingError) as excinfo:
        stripe(description, graph)
    assert excinfo.value.description == description


def test_text_not_xml_compatible():
    graph = Graph()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.instance1, EX.note, Literal("bell \x07")))
    description = Description(EX.work1, EX.instance1, (), (), ())
    with pytest.raises(StripingError):
        stripe(description, graph)


def test_items_follow_instance():
    store = GraphStore()
    store.parse("""
    @prefix bf: <http://id.loc.gov/ontologies/bibframe/> .
    @prefix ex: <http://example.org/> .
    ex:work1 bf:hasInstance ex:instance1 .
    ex:item1 a bf:Item ; bf:itemOf ex:instance1 .
    """, informat="turtle")
    description = extract(store)[0]
    doc = stripe(description, subgraph(store, description))
    assert doc.xpath("/rdf:RDF/rdf:Description/@rdf:about", namespaces=ns) == [
        str(EX.work1), str(EX.instance1), str(EX.item1)]
    assert doc.xpath("/rdf:RDF/rdf:Description[3]/bf:itemOf/@rdf:resource", namespaces=ns) == [str(EX.instance1)]


def test_sibling_blank_nodes_get_distinct_ids():
    graph = Graph()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.instance1, BF.title, BNode()))
    graph.add((EX.instance1, BF.note, BNode()))
    for node in list(graph.objects(EX.instance1, None)):
        if isinstance(node, BNode):
            graph.add((node, RDF.type, BF.Title))
    description = Description(EX.work1, EX.instance1, (), (), ())
    doc = stripe(description, graph)
    ids = doc.xpath("/rdf:RDF/rdf:Description[2]/*/rdf:Description/@rdf:nodeID", namespaces=ns)
    assert len(ids) == 2
    assert len(set(ids)) == 2


def test_blank_roots_get_distinct_ids():
    graph = Graph()
    work, instance = BNode(), BNode()
    graph.add((work, BF.hasInstance, instance))
    graph.add((instance, BF.instanceOf, work))
    description = Description(work, instance, (), (), ())
    doc = stripe(description, graph)
    ids = doc.xpath("//rdf:Description/@rdf:nodeID", namespaces=ns)
    assert len(ids) == len(set(ids)) == 4
    # each cycle marker names the top level resource it leads back to
    work_id, instance_id = doc.xpath("/rdf:RDF/rdf:Description/@rdf:nodeID", namespaces=ns)
    assert doc.xpath("/rdf:RDF/rdf:Description[1]/bf:hasInstance/rdf:Description/bf:instanceOf/@rdf:nodeID",
                     namespaces=ns) == [work_id]
    assert doc.xpath("/rdf:RDF/rdf:Description[2]/bf:instanceOf/rdf:Description/bf:hasInstance/@rdf:nodeID",
                     namespaces=ns) == [instance_id]


def test_blank_ids_independent_of_labels():
    def build(labels):
        graph = Graph()
        work, instance = BNode(labels[0]), BNode(labels[1])
        graph.add((work, BF.hasInstance, instance))
        graph.add((instance, BF.title, BNode(labels[2])))
        graph.add((BNode(labels[2]), BF.mainTitle, Literal("Cats")))
        return stripe(Description(work, instance, (), (), ()), graph)

    assert tostring(build(["a", "b", "c"])) == tostring(build(["z", "y", "x"]))
