from __future__ import annotations
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from core import config
from core.exceptions import StoreError
from core.models import Task

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = ("text", "deadline", "completed")
# safe to resend after the server answered
IDEMPOTENT_METHODS = ("GET", "PATCH", "DELETE")


def _never_sent(e: requests.RequestException) -> bool:
    """True when the request cannot have reached the server (connect phase failed).

    A read timeout or a dropped connection after sending may still have
    created the record, so those do not count.
    """
    if isinstance(e, requests.ConnectTimeout):
        return True
    return isinstance(e, requests.ConnectionError) and not isinstance(e, requests.ReadTimeout)


class PocketBaseClient:
    """Task store backed by a PocketBase collection (records: text, deadline, completed)."""

    def __init__(
        self,
        base_url: str,
        collection: str = "tasks",
        *,
        timeout: float = config.REQUEST_TIMEOUT,
        retries: int = config.STORE_RETRIES,
        backoff: float = config.STORE_RETRY_BACKOFF,
        page_size: int = config.PAGE_SIZE,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.collection = collection
        self.timeout = timeout
        self.retries = max(0, retries)
        self.backoff = backoff
        self.page_size = page_size
        self.session = session or requests.Session()

    @property
    def records_url(self) -> str:
        return f"{self.base_url}/api/collections/{self.collection}/records"

    def close(self) -> None:
        self.session.close()

    # ---------- transport ----------
    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.RequestException as e:
                logger.warning("%s %s failed (attempt %d/%d): %s", method, url, attempt, attempts, e)
                if attempt == attempts or not (method in IDEMPOTENT_METHODS or _never_sent(e)):
                    raise StoreError(f"{method} {url} failed: {e}") from e
            else:
                if r.ok:
                    return r
                retryable = r.status_code >= 500 and method in IDEMPOTENT_METHODS
                if not retryable or attempt == attempts:
                    raise StoreError(f"{method} failed: {r.status_code} {r.text}", status_code=r.status_code)
                logger.warning("%s %s -> %s (attempt %d/%d)", method, url, r.status_code, attempt, attempts)
            time.sleep(self.backoff * attempt)
        raise StoreError(f"{method} {url} failed")  # unreachable with attempts >= 1

    # ---------- tasks ----------
    def list_tasks(self) -> List[Task]:
        """All tasks, deadline ascending."""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            r = self._request(
                "GET",
                self.records_url,
                params={"sort": "deadline", "page": page, "perPage": self.page_size},
            )
            data = r.json()
            items.extend(data.get("items", []))
            total_pages = data.get("totalPages") or 1
            if page >= total_pages:
                break
            page += 1
        logger.debug("listed %d tasks", len(items))
        return [Task.from_record(i) for i in items]

    def create_task(self, text: str, deadline: str) -> Task:
        payload = {"text": text, "deadline": deadline, "completed": False}
        r = self._request("POST", self.records_url, json=payload)
        task = Task.from_record(r.json())
        logger.info("created task %s", task.id)
        return task

    def update_task(self, task_id: str, **fields) -> Task:
        unknown = set(fields) - set(WRITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        r = self._request("PATCH", f"{self.records_url}/{task_id}", json=fields)
        logger.info("updated task %s: %s", task_id, ", ".join(sorted(fields)))
        return Task.from_record(r.json())

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"{self.records_url}/{task_id}")
        logger.info("deleted task %s", task_id)
