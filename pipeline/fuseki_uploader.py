"""
Fusekiアップローダーモジュール

SPARQL 1.1 Graph Store HTTP Protocol を使って名前付きグラフ単位で
RDFデータをApache Jena Fusekiと送受信します。
"""

import logging
from typing import Optional

import requests
from rdflib import Graph

from backend.config import GRAPH_STORE_ENDPOINT, GRAPH_STORE_TIMEOUT, FUSEKI_ENDPOINT
from backend.exceptions import GraphStoreError


class FusekiUploader:
    """Fusekiサーバーとの名前付きグラフ送受信を行うクラス"""

    def __init__(
        self,
        data_endpoint: str = GRAPH_STORE_ENDPOINT,
        server_endpoint: str = FUSEKI_ENDPOINT,
        timeout: float = GRAPH_STORE_TIMEOUT,
    ):
        """
        Args:
            data_endpoint: Graph Store Protocolのエンドポイント（.../dataset/data）
            server_endpoint: Fusekiサーバーのベースエンドポイント
            timeout: リクエストタイムアウト（秒）
        """
        self.data_endpoint = data_endpoint.rstrip("/")
        self.server_endpoint = server_endpoint.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def check_connection(self) -> bool:
        """
        Fusekiサーバーへの接続を確認

        Returns:
            接続成功ならTrue
        """
        try:
            response = requests.get(f"{self.server_endpoint}/$/ping", timeout=5)
            return response.status_code == 200
        except requests.RequestException as e:
            self.logger.error(f"Fuseki接続エラー: {e}")
            return False

    def _send(self, method: str, graph_uri: str, data: Optional[bytes] = None):
        headers = {}
        if data is not None:
            headers["Content-Type"] = "text/turtle; charset=utf-8"
        else:
            headers["Accept"] = "text/turtle"
        try:
            return requests.request(
                method,
                self.data_endpoint,
                params={"graph": graph_uri},
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Graph Store通信エラー: {e}")
            raise GraphStoreError(
                f"{method} of graph {graph_uri} failed: {e}"
            ) from e

    @staticmethod
    def _check(response, graph_uri: str):
        if response.status_code not in (200, 201, 204):
            raise GraphStoreError(
                f"Graph store returned {response.status_code} for graph {graph_uri}: "
                f"{response.text}"
            )

    def put_graph(self, graph: Graph, graph_uri: str) -> None:
        """
        名前付きグラフの内容を置換

        Args:
            graph: アップロードするグラフ
            graph_uri: 名前付きグラフのURI
        """
        data = graph.serialize(format="turtle").encode("utf-8")
        response = self._send("PUT", graph_uri, data)
        self._check(response, graph_uri)
        self.logger.info(f"グラフ置換成功: {graph_uri} ({len(graph)} triples)")

    def post_graph(self, graph: Graph, graph_uri: str) -> None:
        """
        名前付きグラフへトリプルを追加

        Args:
            graph: 追加するグラフ
            graph_uri: 名前付きグラフのURI
        """
        data = graph.serialize(format="turtle").encode("utf-8")
        response = self._send("POST", graph_uri, data)
        self._check(response, graph_uri)
        self.logger.info(f"グラフ追加成功: {graph_uri} ({len(graph)} triples)")

    def get_graph(self, graph_uri: str) -> Graph:
        """
        名前付きグラフを取得

        Args:
            graph_uri: 名前付きグラフのURI

        Returns:
            グラフ（存在しない場合は空のグラフ）
        """
        response = self._send("GET", graph_uri)
        graph = Graph()
        if response.status_code == 404:
            return graph
        self._check(response, graph_uri)
        graph.parse(data=response.text, format="turtle")
        return graph

    def delete_graph(self, graph_uri: str) -> None:
        """
        名前付きグラフを削除

        Args:
            graph_uri: 削除するグラフのURI
        """
        response = self._send("DELETE", graph_uri)
        # 存在しないグラフの削除はエラーにしない
        if response.status_code == 404:
            return
        self._check(response, graph_uri)
        self.logger.info(f"グラフ削除成功: {graph_uri}")
