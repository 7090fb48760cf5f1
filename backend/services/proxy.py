"""Cache-then-fetch pipeline over the Recife CKAN and transparency APIs.

Each public method maps one local endpoint to a cache key, an upstream URL
and a TTL. Payloads are passed through untouched.
"""

import logging
from typing import Any

import httpx

from config import Settings
from errors import ClientInputError
from services.cache import TTLCache
from services.fetcher import Fetcher

logger = logging.getLogger(__name__)

# TTLs in seconds, per logical resource
TTL_DATASET_LIST = 3600
TTL_DATASET_DETAIL = 1800
TTL_DATASTORE = 900
TTL_FINANCE = 1800
TTL_SEARCH = 1800

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0
DEFAULT_ROWS = 20

# Curated CKAN datastore resources: cache key -> (resource id, row limit, ttl)
CURATED_RESOURCES = {
    "saude_medicamentos": ("49657ff7-9860-4b3b-9840-c4239c34f3d2", 1000, 900),
    "cttu_acidentes": ("b8094cbb-c904-4325-b375-8276bc1a6d0b", 1000, 900),
    "empresas_cadastro": ("61ca6a8b-1648-44a5-87db-431777b33144", 5000, 3600),
    # Live citizen requests, refreshed more often than the registry
    "156_demandas": ("a87570a9-94af-4610-b729-a59ff21a574d", 2000, 900),
}

_MISSING = object()


class OpenDataProxy:
    def __init__(self, cache: TTLCache, fetcher: Fetcher, settings: Settings):
        self.cache = cache
        self.fetcher = fetcher
        self.settings = settings

    async def get_or_fetch(self, key: str, url: str, ttl_seconds: int) -> Any:
        """Return the cached payload for ``key`` or fetch ``url`` and cache it.

        Upstream failures propagate as UpstreamError and nothing is cached.
        Concurrent misses on the same key each hit upstream.
        """
        data = self.cache.get(key, _MISSING)
        if data is not _MISSING:
            return data

        logger.debug("Cache miss for %s, fetching %s", key, url)
        data = await self.fetcher.fetch(url)
        self.cache.set(key, data, ttl_seconds)
        return data

    def _ckan(self, action: str, params: dict | None = None) -> str:
        return str(httpx.URL(f"{self.settings.ckan_base_url}/action/{action}", params=params))

    async def datasets(self) -> Any:
        return await self.get_or_fetch("datasets_list", self._ckan("package_list"), TTL_DATASET_LIST)

    async def dataset(self, dataset_id: str) -> Any:
        url = self._ckan("package_show", {"id": dataset_id})
        return await self.get_or_fetch(f"dataset_{dataset_id}", url, TTL_DATASET_DETAIL)

    async def datastore(
        self,
        resource_id: str,
        limit: int = DEFAULT_LIMIT,
        offset: int = DEFAULT_OFFSET,
        filters: str | None = None,
    ) -> Any:
        params: dict[str, Any] = {"resource_id": resource_id, "limit": limit, "offset": offset}
        if filters:
            params["filters"] = filters
        key = f"datastore_{resource_id}_{limit}_{offset}_{filters or 'nofilter'}"
        return await self.get_or_fetch(key, self._ckan("datastore_search", params), TTL_DATASTORE)

    async def curated(self, name: str) -> Any:
        """Fetch one of the fixed datastore resources in CURATED_RESOURCES."""
        resource_id, limit, ttl = CURATED_RESOURCES[name]
        url = self._ckan("datastore_search", {"resource_id": resource_id, "limit": limit})
        return await self.get_or_fetch(name, url, ttl)

    async def revenues(self, year: int | None = None) -> Any:
        year = self.settings.default_year if year is None else year
        url = f"{self.settings.receitas_base_url}/{year}"
        return await self.get_or_fetch(f"receitas_{year}", url, TTL_FINANCE)

    async def expenses(self, year: int | None = None) -> Any:
        year = self.settings.default_year if year is None else year
        url = f"{self.settings.despesas_base_url}/{year}"
        return await self.get_or_fetch(f"despesas_{year}", url, TTL_FINANCE)

    async def search(self, q: str | None, rows: int = DEFAULT_ROWS) -> Any:
        if not q:
            raise ClientInputError("Search parameter (q) is required")
        url = self._ckan("package_search", {"q": q, "rows": rows})
        return await self.get_or_fetch(f"search_{q}_{rows}", url, TTL_SEARCH)
