"""程序全文检索

SearchClient：基于 requests 的 Meilisearch 兼容 HTTP 客户端，失败时抛出 UpstreamIndexError。
SearchIndexer：主事务提交后发布索引事件，由后台线程投递，带重试与指数退避；
最终失败只记录日志，不影响主写入。
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from ..errors import UpstreamIndexError

logger = logging.getLogger(__name__)

SEARCHABLE_ATTRIBUTES = ["name", "partNumber", "customer", "description", "operation", "material"]
FILTERABLE_ATTRIBUTES = ["status", "machineId", "customer", "authorId"]
SORTABLE_ATTRIBUTES = ["lastModified", "name", "partNumber"]


def program_document(program) -> Dict[str, Any]:
    """把 NCProgram 转换为索引文档"""
    modified = program.last_modified or program.created_at
    return {
        "id": program.id,
        "name": program.name,
        "partNumber": program.part_number,
        "revision": program.revision,
        "customer": program.customer,
        "description": program.description or "",
        "operation": program.operation,
        "material": program.material,
        "status": program.status,
        "machineId": program.machine_id,
        "authorId": program.author_id,
        "lastModified": int(modified.timestamp() * 1000) if modified else int(time.time() * 1000),
    }


def _quote(value: str) -> str:
    return '"' + str(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


class SearchClient:
    """程序索引客户端；host 为空时整体禁用，所有查询返回空结果"""

    def __init__(self, host: str = "", api_key: str = "", index_name: str = "programs", timeout: float = 5.0):
        self.base_url = (host or "").rstrip("/")
        self.api_key = api_key
        self.index_name = index_name
        self.timeout = timeout
        self.session: Optional[requests.Session] = None

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def open(self) -> "SearchClient":
        """建立会话并确保索引存在、配置可检索 / 过滤 / 排序字段"""
        if not self.enabled:
            logger.info("Search index disabled (no host configured)")
            return self
        self.session = requests.Session()
        self.session.headers.update(self._headers())
        try:
            self.ensure_index()
        except UpstreamIndexError as exc:
            # 搜索是尽力而为的，启动时不可用也不阻塞服务
            logger.warning("Search index not available, search degraded: %s", exc)
        return self

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        if not self.enabled:
            raise UpstreamIndexError("Search index is disabled")
        http = self.session or requests
        url = f"{self.base_url}{path}"
        try:
            resp = http.request(method, url, timeout=self.timeout, headers=self._headers(), **kwargs)
        except requests.RequestException as exc:
            raise UpstreamIndexError(f"Search request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise UpstreamIndexError(f"Search index rejected {method} {path}: HTTP {resp.status_code}")
        return resp

    def ensure_index(self) -> None:
        index_path = f"/indexes/{self.index_name}"
        try:
            self._request("GET", index_path)
            logger.info("Search: connected to existing index %s", self.index_name)
        except UpstreamIndexError:
            self._request("POST", "/indexes", json={"uid": self.index_name, "primaryKey": "id"})
            logger.info("Search: created index %s", self.index_name)
        self._request("PUT", f"{index_path}/settings/searchable-attributes", json=SEARCHABLE_ATTRIBUTES)
        self._request("PUT", f"{index_path}/settings/filterable-attributes", json=FILTERABLE_ATTRIBUTES)
        self._request("PUT", f"{index_path}/settings/sortable-attributes", json=SORTABLE_ATTRIBUTES)

    def index_documents(self, documents: List[Dict[str, Any]]) -> None:
        if documents:
            self._request("POST", f"/indexes/{self.index_name}/documents", json=documents)

    def delete_document(self, document_id: str) -> None:
        self._request("DELETE", f"/indexes/{self.index_name}/documents/{document_id}")

    def clear(self) -> None:
        self._request("DELETE", f"/indexes/{self.index_name}/documents")

    def search(self, query: str, filters: Optional[Dict[str, Optional[str]]] = None, limit: int = 20) -> List[str]:
        """全文检索，返回按相关度（再按 lastModified 倒序）排列的程序 id"""
        if not self.enabled:
            return []
        parts = [f"{key} = {_quote(value)}" for key, value in (filters or {}).items() if value]
        body: Dict[str, Any] = {"q": query, "limit": limit, "sort": ["lastModified:desc"]}
        if parts:
            body["filter"] = " AND ".join(parts)
        resp = self._request("POST", f"/indexes/{self.index_name}/search", json=body)
        try:
            hits = resp.json().get("hits") or []
        except ValueError as exc:
            raise UpstreamIndexError("Search index returned malformed JSON") from exc
        return [str(hit["id"]) for hit in hits if "id" in hit]


@dataclass
class IndexEvent:
    action: str  # upsert / delete / clear
    documents: List[Dict[str, Any]] = field(default_factory=list)
    document_id: Optional[str] = None


_STOP = object()


class SearchIndexer:
    """索引事件队列与后台投递线程"""

    def __init__(self, client: SearchClient, retry_attempts: int = 3, backoff_seconds: float = 0.5):
        self.client = client
        self.retry_attempts = max(1, retry_attempts)
        self.backoff_seconds = backoff_seconds
        self._queue: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "SearchIndexer":
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name="search-indexer", daemon=True)
            self._thread.start()
        return self

    def stop(self, timeout: float = 10.0) -> None:
        if self._thread is not None and self._thread.is_alive():
            self._queue.put(_STOP)
            self._thread.join(timeout)
        self._thread = None
        # 线程退出后残留的事件就地投递
        self.drain()

    def publish_upsert(self, documents: List[Dict[str, Any]]) -> None:
        if self.client.enabled and documents:
            self._queue.put(IndexEvent("upsert", documents=documents))

    def publish_delete(self, document_id: str) -> None:
        if self.client.enabled:
            self._queue.put(IndexEvent("delete", document_id=document_id))

    def publish_clear(self) -> None:
        if self.client.enabled:
            self._queue.put(IndexEvent("clear"))

    def drain(self) -> None:
        """等待（或就地处理）所有待投递事件"""
        if self._thread is not None and self._thread.is_alive():
            self._queue.join()
            return
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return
            try:
                if event is not _STOP:
                    self._process(event)
            finally:
                self._queue.task_done()

    def _run(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is _STOP:
                    return
                self._process(event)
            finally:
                self._queue.task_done()

    def _process(self, event: IndexEvent) -> None:
        # 单个事件出错只记录日志，投递线程继续处理后续事件
        try:
            self._deliver(event)
        except Exception:
            logger.exception("Search index %s dropped after unexpected error", event.action)

    def _apply(self, event: IndexEvent) -> None:
        if event.action == "upsert":
            self.client.index_documents(event.documents)
        elif event.action == "delete":
            self.client.delete_document(event.document_id)
        elif event.action == "clear":
            self.client.clear()

    def _deliver(self, event: IndexEvent) -> bool:
        for attempt in range(1, self.retry_attempts + 1):
            try:
                self._apply(event)
                return True
            except UpstreamIndexError as exc:
                if attempt == self.retry_attempts:
                    logger.error("Search index %s failed after %s attempts: %s", event.action, attempt, exc)
                    return False
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning("Search index %s failed (attempt %s), retrying in %.2fs: %s",
                               event.action, attempt, delay, exc)
                if delay:
                    time.sleep(delay)
        return False
