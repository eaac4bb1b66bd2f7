"""
SPARQLクライアント

Fusekiに対してSPARQL SELECT / CONSTRUCT / UPDATEを実行します。
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

import httpx
from rdflib import Graph

from backend.config import (
    SPARQL_QUERY_ENDPOINT,
    SPARQL_UPDATE_ENDPOINT,
    SPARQL_TIMEOUT,
)
from backend.exceptions import GraphStoreError


logger = logging.getLogger(__name__)


# SPARQLのIRIREFで使用できない文字
_INVALID_IRI_CHARS = re.compile(r'[<>"{}|^`\\\x00-\x20]')


def iri(value: str) -> str:
    """IRIをSPARQLに埋め込める形式（<...>）に変換"""
    value = str(value)
    if not value or _INVALID_IRI_CHARS.search(value):
        raise ValueError(f"Invalid IRI: {value!r}")
    return f"<{value}>"


def iri_list(values: Iterable[str]) -> str:
    """VALUES句用にIRIを空白区切りで連結"""
    return " ".join(iri(v) for v in values)


class SPARQLClient:
    """トリプルストア用SPARQLクライアント"""

    def __init__(
        self,
        query_endpoint: str = SPARQL_QUERY_ENDPOINT,
        update_endpoint: str = SPARQL_UPDATE_ENDPOINT,
        timeout: float = SPARQL_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.query_endpoint = query_endpoint
        self.update_endpoint = update_endpoint
        self.timeout = timeout
        self.transport = transport

    def _post(self, url: str, body: str, content_type: str, accept: str) -> httpx.Response:
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.post(
                    url,
                    content=body.encode("utf-8"),
                    headers={
                        "Content-Type": content_type,
                        "Accept": accept,
                    },
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                logger.error(f"SPARQL request failed: {e.response.status_code}")
                raise GraphStoreError(
                    f"SPARQL endpoint {url} returned {e.response.status_code}"
                ) from e
            except httpx.RequestError as e:
                logger.error(f"SPARQL request error: {e}")
                raise GraphStoreError(f"SPARQL endpoint {url} is not reachable") from e

    def select(self, sparql: str) -> List[Dict[str, Any]]:
        """SELECTクエリを実行し、バインディングのリストを返す"""
        response = self._post(
            self.query_endpoint,
            sparql,
            "application/sparql-query",
            "application/sparql-results+json",
        )
        return response.json().get("results", {}).get("bindings", [])

    def construct(self, sparql: str) -> Graph:
        """CONSTRUCTクエリを実行し、結果のグラフを返す"""
        response = self._post(
            self.query_endpoint,
            sparql,
            "application/sparql-query",
            "text/turtle",
        )
        graph = Graph()
        graph.parse(data=response.text, format="turtle")
        return graph

    def ask(self, sparql: str) -> bool:
        """ASKクエリを実行"""
        response = self._post(
            self.query_endpoint,
            sparql,
            "application/sparql-query",
            "application/sparql-results+json",
        )
        return bool(response.json().get("boolean", False))

    def update(self, sparql: str) -> None:
        """SPARQL Updateを実行"""
        self._post(
            self.update_endpoint,
            sparql,
            "application/sparql-update",
            "*/*",
        )

    def clear_graph(self, graph_uri: str) -> None:
        """名前付きグラフを空にする"""
        logger.debug(f"Clearing graph {graph_uri}")
        self.update(f"CLEAR SILENT GRAPH {iri(graph_uri)}")

    def add_graph(self, source_uri: str, target_uri: str) -> None:
        """sourceグラフのトリプルをtargetグラフへ追加"""
        logger.debug(f"Adding graph {source_uri} to {target_uri}")
        self.update(f"ADD SILENT GRAPH {iri(source_uri)} TO GRAPH {iri(target_uri)}")

    def check_connection(self) -> bool:
        """Fusekiへの接続を確認"""
        try:
            self.ask("ASK { ?s ?p ?o }")
            return True
        except GraphStoreError:
            return False
