"""共通フィクスチャ（rdflibによるグラフストアと記録用gitゲートウェイ）"""

import json
from pathlib import Path

import pytest
from rdflib import Dataset, Graph, Literal, Namespace, URIRef
from rdflib.namespace import DCTERMS, RDF, SKOS

from backend.exceptions import GraphStoreError
from backend.services.github_service import GitRepository
from backend.services.vocabulary_service import VocabularyService
from backend.services.workspace_dao import WorkspaceDao
from backend.services.workspace_service import WorkspaceService
from ontology import VOCABULARY
from pipeline.validator import RuleValidator


V1 = "https://slovník.gov.cz/legislativní/sbírka/111/2009"
V2 = "https://slovník.gov.cz/generický/číselníky"
PR_URL = "https://github.com/opendata-mvcr/ssp/pull/7"


# ---------------------------------------------------------------------------
# インメモリのグラフストア
# ---------------------------------------------------------------------------

class InMemoryGraphStore:
    """SPARQLクライアントとGraph Storeアップローダーの両方を兼ねるインメモリストア"""

    def __init__(self):
        self.dataset = Dataset()
        self.queries = []
        self.updates = []
        self.cleared = []
        self.added = []
        self.fail_clear = set()

    # SPARQL client
    def select(self, sparql):
        self.queries.append(sparql)
        result = self.dataset.query(sparql)
        return json.loads(result.serialize(format="json"))["results"]["bindings"]

    def construct(self, sparql):
        self.queries.append(sparql)
        graph = Graph()
        for triple in self.dataset.query(sparql):
            graph.add(triple)
        return graph

    def ask(self, sparql):
        return bool(self.dataset.query(sparql).askAnswer)

    def update(self, sparql):
        self.updates.append(sparql)
        self.dataset.update(sparql)

    def clear_graph(self, graph_uri):
        self.cleared.append(graph_uri)
        if graph_uri in self.fail_clear:
            raise GraphStoreError(f"cannot clear {graph_uri}")
        self.dataset.remove_graph(URIRef(graph_uri))

    def add_graph(self, source_uri, target_uri):
        self.added.append((source_uri, target_uri))
        target = self.dataset.graph(URIRef(target_uri))
        for triple in self.graph(source_uri):
            target.add(triple)

    def check_connection(self):
        return True

    # Graph Store Protocol
    def put_graph(self, graph, graph_uri):
        self.dataset.remove_graph(URIRef(graph_uri))
        target = self.dataset.graph(URIRef(graph_uri))
        for triple in graph:
            target.add(triple)

    def post_graph(self, graph, graph_uri):
        target = self.dataset.graph(URIRef(graph_uri))
        for triple in graph:
            target.add(triple)

    def get_graph(self, graph_uri):
        return self.graph(graph_uri)

    def delete_graph(self, graph_uri):
        self.dataset.remove_graph(URIRef(graph_uri))

    # helpers
    def graph(self, graph_uri):
        copy = Graph()
        for triple in self.dataset.graph(URIRef(graph_uri)):
            copy.add(triple)
        return copy

    def graph_size(self, graph_uri):
        return len(self.graph(graph_uri))


def canonical_vocabulary(vocabulary_uri, title, concepts=("pojem",)):
    """用語集1つと数個の概念を持つキャッシュ済み語彙グラフ"""
    ns = Namespace(f"{vocabulary_uri}/pojem/")
    glossary = URIRef(f"{vocabulary_uri}/glosář")
    g = Graph()
    g.add((URIRef(vocabulary_uri), RDF.type, URIRef(VOCABULARY)))
    g.add((URIRef(vocabulary_uri), DCTERMS.title, Literal(title, lang="cs")))
    g.add((glossary, RDF.type, SKOS.ConceptScheme))
    for name in concepts:
        g.add((ns[name], RDF.type, SKOS.Concept))
        g.add((ns[name], SKOS.prefLabel, Literal(name, lang="cs")))
        g.add((ns[name], SKOS.inScheme, glossary))
        g.add((ns[name], SKOS.definition, Literal(f"Definice {name}", lang="cs")))
    return g


# ---------------------------------------------------------------------------
# 記録用gitゲートウェイ
# ---------------------------------------------------------------------------

class FakeGithubService:
    def __init__(self):
        self.checkouts = []
        self.deleted = []
        self.commits = []
        self.pushed = []
        self.pull_requests = []
        self.fail_push = False

    def checkout(self, branch_name, directory):
        self.checkouts.append((branch_name, str(directory)))
        return GitRepository(path=Path(directory), branch=branch_name)

    def delete(self, repo, file):
        self.deleted.append(Path(file).name)
        Path(file).unlink()

    def commit(self, repo, message):
        files = sorted(
            str(p.relative_to(repo.path)) for p in repo.path.rglob("*") if p.is_file()
        )
        self.commits.append((message, files))

    def push(self, repo):
        if self.fail_push:
            raise OSError("remote hung up")
        self.pushed.append(repo.branch)

    def create_or_update_pull_request_to_default(self, branch_name, title, body):
        self.pull_requests.append((branch_name, title, body))
        return PR_URL


# ---------------------------------------------------------------------------
# フィクスチャ
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return InMemoryGraphStore()


@pytest.fixture
def dao(store):
    return WorkspaceDao(store, store)


@pytest.fixture
def vocabulary_service(store, dao):
    return VocabularyService(store, store, dao)


@pytest.fixture
def github():
    return FakeGithubService()


@pytest.fixture
def service(store, dao, vocabulary_service, github):
    return WorkspaceService(
        workspace_dao=dao,
        vocabulary_service=vocabulary_service,
        github_service=github,
        sparql_client=store,
        validator=RuleValidator(),
    )


@pytest.fixture
def catalogue(store):
    """V1を正規の語彙グラフとしてキャッシュ"""
    store.put_graph(canonical_vocabulary(V1, "Zákon o základních registrech"), V1)
    return store
