"""エンティティとRDF対応表のテスト"""

import pytest
from rdflib import Graph, Literal, URIRef
from rdflib.namespace import RDF, RDFS

from backend.models.entities import ChangeTrackingContext, VocabularyContext, Workspace
from backend.models.mapping import (
    assign_uris,
    cascade_remove,
    from_graph,
    to_graph,
    unmapped_triples,
)
from ontology import (
    BASED_ON_VOCABULARY_VERSION,
    CHANGE_TRACKING_CONTEXT,
    REFERS_TO_VOCABULARY_CONTEXT,
    VOCABULARY_CONTEXT,
    VOCABULARY_CONTEXT_READONLY,
    WORKSPACE,
)

V1 = "https://slovník.gov.cz/legislativní/sbírka/111/2009"
V2 = "https://slovník.gov.cz/generický/číselníky"


def _workspace() -> Workspace:
    workspace = Workspace(label="Novela zákona")
    workspace.add_vocabulary_context(VocabularyContext.stub(V1))
    readonly = VocabularyContext.stub(V2)
    readonly.readonly = True
    workspace.add_vocabulary_context(readonly)
    assign_uris(workspace)
    return workspace


# ---------------------------------------------------------------------------
# エンティティ
# ---------------------------------------------------------------------------

class TestEntities:
    def test_stub_has_change_tracking_context_for_same_vocabulary(self):
        context = VocabularyContext.stub(V1)
        assert context.based_on_vocabulary_version == V1
        assert context.change_tracking_context.changes_vocabulary_version == V1
        assert context.uri is None

    def test_based_on_vocabulary_version_is_immutable(self):
        context = VocabularyContext.stub(V1)
        context.based_on_vocabulary_version = V1
        with pytest.raises(ValueError):
            context.based_on_vocabulary_version = V2

    def test_readonly_marker_toggles_type(self):
        context = VocabularyContext.stub(V1)
        assert not context.readonly
        context.readonly = True
        assert VOCABULARY_CONTEXT_READONLY in context.types
        context.readonly = False
        assert context.types == set()

    def test_workspace_rejects_duplicate_vocabulary(self):
        workspace = Workspace(label="W")
        workspace.add_vocabulary_context(VocabularyContext.stub(V1))
        with pytest.raises(ValueError):
            workspace.add_vocabulary_context(VocabularyContext.stub(V1))
        assert len(workspace.vocabulary_contexts) == 1

    def test_contexts_compare_by_uri(self):
        a = VocabularyContext(uri="urn:a", based_on_vocabulary_version=V1)
        b = VocabularyContext(uri="urn:a", based_on_vocabulary_version=V1)
        assert a == b
        assert hash(a) == hash(b)
        assert VocabularyContext.stub(V1) != VocabularyContext.stub(V1)

    def test_local_name(self):
        assert Workspace(uri="https://example.org/ws/instance-1").local_name == "instance-1"


# ---------------------------------------------------------------------------
# 対応表
# ---------------------------------------------------------------------------

class TestMapping:
    def test_assign_uris_reaches_owned_entities(self):
        workspace = _workspace()
        assert workspace.uri.startswith(f"{WORKSPACE}/instance-")
        for context in workspace.vocabulary_contexts:
            assert context.uri.startswith(f"{VOCABULARY_CONTEXT}/instance-")
            assert context.change_tracking_context.uri.startswith(
                f"{CHANGE_TRACKING_CONTEXT}/instance-"
            )

    def test_to_graph_writes_predicates_from_table(self):
        workspace = _workspace()
        graph = to_graph(workspace)
        ws = URIRef(workspace.uri)

        assert (ws, RDF.type, URIRef(WORKSPACE)) in graph
        assert (ws, RDFS.label, Literal("Novela zákona")) in graph
        refs = set(graph.objects(ws, URIRef(REFERS_TO_VOCABULARY_CONTEXT)))
        assert refs == {URIRef(c.uri) for c in workspace.vocabulary_contexts}
        first = workspace.vocabulary_contexts[0]
        assert graph.value(URIRef(first.uri), URIRef(BASED_ON_VOCABULARY_VERSION)) == URIRef(V1)

    def test_round_trip_through_graph(self):
        workspace = _workspace()
        restored = from_graph(to_graph(workspace), workspace.uri, Workspace)

        assert restored.label == "Novela zákona"
        assert {c.uri for c in restored.vocabulary_contexts} == {
            c.uri for c in workspace.vocabulary_contexts
        }
        readonly = restored.get_vocabulary_context(V2)
        assert readonly.readonly
        assert not restored.get_vocabulary_context(V1).readonly
        assert readonly.change_tracking_context.changes_vocabulary_version == V2

    def test_missing_required_field_is_rejected(self):
        context = VocabularyContext(uri="urn:ctx", based_on_vocabulary_version=V1)
        with pytest.raises(ValueError):
            to_graph(context)

    def test_unmapped_resource_returns_none(self):
        assert from_graph(Graph(), "urn:nothing", Workspace) is None

    def test_references_of_other_kinds_are_skipped(self):
        workspace = _workspace()
        graph = to_graph(workspace)
        graph.add((
            URIRef(workspace.uri),
            URIRef(REFERS_TO_VOCABULARY_CONTEXT),
            URIRef("urn:some-other-context"),
        ))
        restored = from_graph(graph, workspace.uri, Workspace)
        assert len(restored.vocabulary_contexts) == 2

    def test_unmapped_triples_keep_other_kinds_only(self):
        workspace = _workspace()
        graph = to_graph(workspace)
        attachment = (URIRef("urn:priloha"), RDF.type, URIRef("urn:typ-prilohy"))
        reference = (URIRef(workspace.uri), URIRef(REFERS_TO_VOCABULARY_CONTEXT), URIRef("urn:priloha"))
        graph.add(attachment)
        graph.add(reference)

        rest = unmapped_triples(graph, workspace.uri, Workspace)

        assert set(rest) == {attachment, reference}

    def test_cascade_remove_includes_change_tracking_context(self):
        context = VocabularyContext(
            uri="urn:ctx",
            based_on_vocabulary_version=V1,
            change_tracking_context=ChangeTrackingContext(uri="urn:ctc"),
        )
        assert cascade_remove(context) == ["urn:ctx", "urn:ctc"]
