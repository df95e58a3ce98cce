"""HTTP client for the job record store.

The store speaks the `LegacyJobRecord` JSON contract on `{base}/jobs`:
GET (list / one), POST (create), PATCH (partial update), DELETE.
Every record coming back is read through `records.normalize_job`, so callers
always get a well-formed record whatever the store holds.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from .config import settings
from .exceptions import StoreError
from .models import LegacyJobRecord
from .records import normalize_job

logger = logging.getLogger(__name__)

RecordId = Union[str, int]


def record_payload(record: Union[LegacyJobRecord, Mapping[str, Any]]) -> Dict[str, Any]:
    """JSON body for a record or a partial camelCase update."""
    if isinstance(record, LegacyJobRecord):
        return record.model_dump(mode="json", by_alias=True, exclude_none=True)
    return dict(record)


class JobStoreClient:
    """Create, read, update and delete job records."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_s: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.store_base_url).rstrip("/")
        self._timeout = timeout_s if timeout_s is not None else settings.http_timeout_s
        self._max_retries = max_retries if max_retries is not None else settings.store_max_retries
        self._backoff_s = backoff_s if backoff_s is not None else settings.store_backoff_s
        self._transport = transport

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(
                timeout=self._timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            ) as client:
                retries = 0
                while True:
                    try:
                        resp = client.request(method, url, json=json)
                        resp.raise_for_status()
                        return resp
                    except httpx.HTTPStatusError as exc:
                        if exc.response.status_code == 429 and retries < self._max_retries:
                            time.sleep(self._backoff_s * (2**retries))
                            retries += 1
                            continue
                        raise
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("%s %s failed with status %s", method, url, status)
            raise StoreError(f"{method} {path} failed: HTTP {status}", status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise StoreError(f"{method} {path} failed: {exc}") from exc

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreError(f"Store returned a non-JSON body (HTTP {resp.status_code})", resp.status_code) from exc

    def list_jobs(self) -> List[LegacyJobRecord]:
        """Fetch all jobs. A non-list body is treated as no jobs."""
        data = self._json(self._request("GET", "/jobs"))
        if not isinstance(data, list):
            logger.warning("Store returned %s instead of a list of jobs", type(data).__name__)
            return []
        return [normalize_job(item) for item in data]

    def get_job(self, job_id: RecordId) -> LegacyJobRecord:
        return normalize_job(self._json(self._request("GET", f"/jobs/{job_id}")))

    def create_job(self, record: Union[LegacyJobRecord, Mapping[str, Any]]) -> LegacyJobRecord:
        created = normalize_job(self._json(self._request("POST", "/jobs", json=record_payload(record))))
        logger.info("Created job %s", created.id)
        return created

    def update_job(self, job_id: RecordId, changes: Union[LegacyJobRecord, Mapping[str, Any]]) -> LegacyJobRecord:
        """PATCH a job with a full record or a partial camelCase mapping."""
        return normalize_job(self._json(self._request("PATCH", f"/jobs/{job_id}", json=record_payload(changes))))

    def delete_job(self, job_id: RecordId) -> None:
        resp = self._request("DELETE", f"/jobs/{job_id}")
        if resp.status_code != 204 and resp.content:
            self._json(resp)
        logger.info("Deleted job %s", job_id)
