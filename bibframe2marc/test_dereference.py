# coding: utf-8

"""
Tests for dereferencing external resources.
"""

import itertools

import pytest
import requests
import responses
from rdflib import RDF, RDFS, Graph, Literal, Namespace, URIRef

from bibframe2marc.configuration import DereferenceConfig
from bibframe2marc.dereference import Fetcher, candidates, resolve
from bibframe2marc.errors import DereferenceError
from bibframe2marc.extract import Description, subgraph
from bibframe2marc.graph import GraphStore
from bibframe2marc.stripe import stripe, tostring

BF = Namespace("http://id.loc.gov/ontologies/bibframe/")
EX = Namespace("http://example.org/")
AUTH = Namespace("http://example.org/auth/")
OTHER = URIRef("http://other.org/123")

config = DereferenceConfig({str(EX.ClassX): [str(AUTH)]})


class RecordingFetch(object):
    """ Fake lookup, returns a label for every IRI, remembers calls. """

    def __init__(self, fail=()):
        self.calls = []
        self.fail = set(fail)

    def __call__(self, iri):
        self.calls.append(iri)
        if iri in self.fail:
            raise DereferenceError("lookup of %s failed" % iri)
        graph = Graph()
        graph.add((iri, RDFS.label, Literal("Label of %s" % iri)))
        return graph


def sample_graph():
    graph = Graph()
    graph.add((EX.work1, BF.hasInstance, EX.instance1))
    graph.add((EX.work1, RDF.type, EX.ClassX))
    graph.add((EX.work1, BF.subject, AUTH["123"]))
    graph.add((EX.work1, BF.genreForm, OTHER))
    graph.add((EX.instance1, RDF.type, BF.Instance))
    graph.add((EX.instance1, BF.carrier, AUTH["456"]))
    return graph


description = Description(EX.work1, EX.instance1, (EX.ClassX,), (BF.Instance,), ())


def test_prefix_match_triggers_dereference():
    assert candidates(sample_graph(), description, config) == [AUTH["123"]]


def test_subject_type_must_match():
    # instance1 links to an auth IRI too, but is not of type ClassX
    assert AUTH["456"] not in candidates(sample_graph(), description, config)


def test_resolve_merges_into_copy():
    graph = sample_graph()
    size = len(graph)
    fetch = RecordingFetch()
    augmented = resolve(graph, description, config, fetch=fetch)
    assert fetch.calls == [AUTH["123"]]
    assert augmented.value(AUTH["123"], RDFS.label) == Literal("Label of %s" % AUTH["123"])
    assert augmented.value(OTHER, RDFS.label) is None
    assert len(graph) == size
    assert augmented is not graph


def test_empty_config_is_identity():
    graph = sample_graph()
    fetch = RecordingFetch()
    assert resolve(graph, description, DereferenceConfig(), fetch=fetch) is graph
    assert resolve(graph, description, None, fetch=fetch) is graph
    assert fetch.calls == []


def test_lookup_failure_is_not_fatal():
    graph = sample_graph()
    fetch = RecordingFetch(fail={AUTH["123"]})
    augmented = resolve(graph, description, config, fetch=fetch)
    assert set(augmented) == set(graph)


def test_each_iri_fetched_once():
    graph = sample_graph()
    graph.add((EX.work1, BF.relatedTo, AUTH["123"]))
    fetch = RecordingFetch()
    resolve(graph, description, config, fetch=fetch)
    assert fetch.calls == [AUTH["123"]]


def test_dereference_isolation():
    store = GraphStore()
    store.parse("""
    @prefix bf: <http://id.loc.gov/ontologies/bibframe/> .
    @prefix ex: <http://example.org/> .
    ex:work1 a ex:ClassX ; bf:hasInstance ex:instance1 ; bf:subject <http://example.org/auth/123> .
    ex:instance1 a bf:Instance .
    ex:work2 a ex:ClassX ; bf:hasInstance ex:instance2 ; bf:subject <http://example.org/auth/999> .
    ex:instance2 a bf:Instance .
    """, informat="turtle")
    store.freeze()
    size = len(store)

    first = Description(EX.work1, EX.instance1, (EX.ClassX,), (BF.Instance,), ())
    second = Description(EX.work2, EX.instance2, (EX.ClassX,), (BF.Instance,), ())

    before = tostring(stripe(second, subgraph(store, second)))

    fetch = RecordingFetch(fail={AUTH["999"]})
    augmented = resolve(subgraph(store, first), first, config, fetch=fetch)
    assert b"Label of http://example.org/auth/123" in tostring(stripe(first, augmented))

    after = tostring(stripe(second, resolve(subgraph(store, second), second, config, fetch=fetch)))
    assert before == after
    assert len(store) == size


sample_auth_turtle = """
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
<http://example.org/auth/123> rdfs:label "Cats" .
"""


@responses.activate
def test_fetcher():
    responses.add(responses.GET, "http://example.org/auth/123", body=sample_auth_turtle,
                  status=200, content_type="text/turtle")
    graph = Fetcher(timeout=1)(AUTH["123"])
    assert graph.value(AUTH["123"], RDFS.label) == Literal("Cats")


@responses.activate
def test_fetcher_not_found():
    responses.add(responses.GET, "http://example.org/auth/123", status=404)
    with pytest.raises(DereferenceError):
        Fetcher(timeout=1)(AUTH["123"])


@responses.activate
def test_fetcher_timeout():
    responses.add(responses.GET, "http://example.org/auth/123",
                  body=requests.exceptions.Timeout("too slow"))
    with pytest.raises(DereferenceError):
        Fetcher(timeout=1)(AUTH["123"])


@responses.activate
def test_fetcher_unparsable():
    responses.add(responses.GET, "http://example.org/auth/123", body="<html>nope",
                  status=200, content_type="text/turtle")
    with pytest.raises(DereferenceError):
        Fetcher(timeout=1)(AUTH["123"])


@responses.activate
def test_resolve_with_fetcher_failure():
    responses.add(responses.GET, "http://example.org/auth/123",
                  body=requests.exceptions.ConnectionError("refused"))
    graph = sample_graph()
    augmented = resolve(graph, description, config, fetch=Fetcher(timeout=1))
    assert set(augmented) == set(graph)


@responses.activate
def test_fetcher_deadline_covers_whole_lookup(monkeypatch):
    # every clock reading is a minute later than the one before
    ticks = itertools.count(0, 60)
    monkeypatch.setattr("bibframe2marc.dereference.clock", lambda: next(ticks))
    responses.add(responses.GET, "http://example.org/auth/123", body=sample_auth_turtle,
                  status=200, content_type="text/turtle")
    with pytest.raises(DereferenceError) as excinfo:
        Fetcher(timeout=10)(AUTH["123"])
    assert "longer than" in str(excinfo.value)


@responses.activate
def test_fetcher_within_deadline(monkeypatch):
    monkeypatch.setattr("bibframe2marc.dereference.clock", lambda: 0)
    responses.add(responses.GET, "http://example.org/auth/123", body=sample_auth_turtle,
                  status=200, content_type="text/turtle")
    graph = Fetcher(timeout=10)(AUTH["123"])
    assert len(graph) == 1
