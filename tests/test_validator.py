"""用語集ルールによるSHACL検証のテスト"""

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import RDF, SH, SKOS

from pipeline.validator import RuleValidator, parse_report

from conftest import V1, canonical_vocabulary


def _concept_without_label():
    g = canonical_vocabulary(V1, "Zákon")
    concept = URIRef(f"{V1}/pojem/bez-názvu")
    g.add((concept, RDF.type, SKOS.Concept))
    g.add((concept, SKOS.inScheme, URIRef(f"{V1}/glosář")))
    g.add((concept, SKOS.definition, Literal("Něco", lang="cs")))
    return g, concept


class TestRuleValidator:
    def test_empty_graph_conforms(self):
        report = RuleValidator().validate(Graph())
        assert report.conforms
        assert report.results == []

    def test_canonical_vocabulary_conforms(self):
        report = RuleValidator().validate(canonical_vocabulary(V1, "Zákon", ("a", "b")))
        assert report.conforms
        assert report.violation_count == 0

    def test_missing_pref_label_is_violation(self):
        graph, concept = _concept_without_label()

        report = RuleValidator().validate(graph)

        assert not report.conforms
        assert report.violation_count == 1
        result = report.results[0]
        assert result.severity == "Violation"
        assert result.focus_node == str(concept)
        assert result.message == "Concept has no skos:prefLabel."
        assert result.result_path == str(SKOS.prefLabel)

    def test_missing_definition_is_warning(self):
        g = canonical_vocabulary(V1, "Zákon")
        g.remove((None, SKOS.definition, None))

        report = RuleValidator().validate(g)

        assert report.violation_count == 0
        assert [r.severity for r in report.results] == ["Warning"]

    def test_vocabulary_without_title(self):
        g = canonical_vocabulary(V1, "Zákon")
        g.remove((URIRef(V1), None, Literal("Zákon", lang="cs")))

        report = RuleValidator().validate(g)

        assert [r.focus_node for r in report.results] == [V1]

    def test_custom_shapes_graph(self):
        shapes = Graph().parse(data="""
            @prefix sh: <http://www.w3.org/ns/shacl#> .
            @prefix skos: <http://www.w3.org/2004/02/skos/core#> .
            <urn:shape> a sh:NodeShape ;
                sh:targetClass skos:Concept ;
                sh:property [ sh:path skos:altLabel ; sh:minCount 1 ] .
        """, format="turtle")

        report = RuleValidator().validate(canonical_vocabulary(V1, "Zákon"), shapes_graph=shapes)

        assert report.violation_count == 1


def _result(graph, focus, severity, message):
    result = BNode()
    graph.add((result, RDF.type, SH.ValidationResult))
    graph.add((result, SH.focusNode, URIRef(focus)))
    graph.add((result, SH.resultSeverity, severity))
    graph.add((result, SH.resultMessage, Literal(message, lang="en")))
    return result


class TestParseReport:
    def test_keeps_every_result_and_conformance(self):
        results = Graph()
        _result(results, "urn:z", SH.Violation, "Second")
        _result(results, "urn:a", SH.Warning, "First")

        report = parse_report(results, conforms=False)

        assert report.conforms is False
        assert len(report.results) == 2
        assert {(r.focus_node, r.severity, r.message) for r in report.results} == {
            ("urn:z", "Violation", "Second"),
            ("urn:a", "Warning", "First"),
        }

    def test_conformance_is_not_recomputed(self):
        results = Graph()
        _result(results, "urn:a", SH.Warning, "Only a warning")

        report = parse_report(results, conforms=True)

        assert report.conforms is True
        assert report.violation_count == 0
        assert [r.focus_node for r in report.results] == ["urn:a"]
