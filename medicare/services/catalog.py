"""Medicine catalog: HTTP client for the backend and the browsing state on top of it."""
import logging
from typing import List, Optional

import requests
from pydantic import ValidationError as SchemaError

from .errors import ServiceError, ValidationError
from .generations import GenerationCounter
from .records import MedicineId, MedicineRecord

logger = logging.getLogger(__name__)

CATALOG_CHANNEL = "catalog"


class HttpCatalogService:
    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _get(self, path: str, params=None, failure="Failed to load medicines"):
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Catalog service unreachable at %s: %s", url, e)
            raise ServiceError(f"{failure}. Please try again later.") from e
        if not resp.ok:
            try:
                message = (resp.json() or {}).get("message") or failure
            except ValueError:
                message = failure
            raise ServiceError(message, status=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise ServiceError(f"{failure}: malformed response", status=resp.status_code) from e

    @staticmethod
    def _records(data) -> List[MedicineRecord]:
        if isinstance(data, dict) and isinstance(data.get("items"), list):
            data = data["items"]
        if not isinstance(data, list):
            raise ServiceError("Catalog returned an unexpected payload", status=200)
        try:
            return [MedicineRecord.model_validate(entry) for entry in data]
        except SchemaError as e:
            raise ServiceError("Catalog returned an unexpected payload", status=200) from e

    def list_medicines(self) -> List[MedicineRecord]:
        return self._records(self._get("/medicines"))

    def search(self, query: str) -> List[MedicineRecord]:
        return self._records(self._get("/medicines/search", params={"query": query}, failure="Search failed"))

    def get_by_id(self, medicine_id: MedicineId) -> MedicineRecord:
        data = self._get(f"/medicines/{medicine_id}", failure="Failed to load medicine details")
        try:
            return MedicineRecord.model_validate(data)
        except SchemaError as e:
            raise ServiceError("Catalog returned an unexpected payload", status=200) from e


class CatalogBrowser:
    """Holds the medicines currently on screen.

    Each browse takes a generation token; if a newer browse has started by
    the time a response arrives, that response is dropped instead of
    overwriting the newer results.
    """

    def __init__(self, service, generations: GenerationCounter):
        self._service = service
        self._generations = generations
        self.query: Optional[str] = None
        self.results: List[MedicineRecord] = []

    def browse(self, query: str = None) -> Optional[List[MedicineRecord]]:
        if query is not None:
            query = query.strip()
            if not query:
                raise ValidationError("Search query is required", fields=["query"])
        token = self._generations.begin(CATALOG_CHANNEL)
        if query:
            records = self._service.search(query)
        else:
            records = self._service.list_medicines()
        if not self._generations.is_current(CATALOG_CHANNEL, token):
            logger.info("Discarding stale catalog response for %r", query)
            return None
        self.query = query
        self.results = list(records)
        logger.info("Catalog shows %d medicines (query=%r)", len(self.results), query)
        return self.results

    def lookup(self, medicine_id: MedicineId) -> MedicineRecord:
        return self._service.get_by_id(medicine_id)
