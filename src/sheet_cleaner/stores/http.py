"""Alias store client for the alias store service."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, TypeVar
from urllib import error, parse, request

from sheet_cleaner.exceptions import AliasStoreError
from sheet_cleaner.matching.repository import ProductAlias, SizeAlias, SizeStat
from sheet_cleaner.stores.base import AliasStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HttpAliasStore(AliasStore):
    """JSON-over-HTTP client for ``alias_store_app``."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_sec: float = 5.0,
        search_limit: int = 20,
    ):
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_sec = timeout_sec
        self.search_limit = search_limit

    def load_size_stats(self) -> list[SizeStat]:
        return self._load(
            "/sizes/stats",
            lambda row: SizeStat(value=row["value"], count=int(row.get("count") or 0)),
        )

    def load_size_aliases(self) -> list[SizeAlias]:
        return self._load(
            "/sizes/aliases",
            lambda row: SizeAlias(alias_text=row["aliasText"], mapped_size=row["mappedSize"]),
        )

    def load_product_aliases(self) -> list[ProductAlias]:
        return self._load(
            "/products/aliases",
            lambda row: ProductAlias(alias_text=row["aliasText"], mapped_product_name=row["mappedProductName"]),
        )

    def load_product_names(self) -> list[str]:
        return self._load("/products/names", str)

    def create_size_alias(self, alias_text: str, mapped_size: str) -> None:
        self._request("POST", "/sizes/aliases", {"aliasText": alias_text, "mappedSize": mapped_size})

    def create_size(self, label: str) -> None:
        self._request("POST", "/sizes", {"value": label})

    def create_product_alias(self, alias_text: str, mapped_product_name: str) -> None:
        self._request(
            "POST",
            "/products/aliases",
            {"aliasText": alias_text, "mappedProductName": mapped_product_name},
        )

    def search_product_names(self, query: str) -> list[str]:
        if not query.strip():
            return []
        qs = parse.urlencode({"q": query, "limit": self.search_limit})
        return self._load(f"/products/search?{qs}", str)

    def _load(self, path: str, build: Callable[[Any], T]) -> list[T]:
        rows = self._request("GET", path) or []
        try:
            return [build(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise AliasStoreError(f"GET {path} returned malformed rows") from exc

    def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        data = None
        if payload is not None:
            data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["x-alias-store-token"] = self.token

        req = request.Request(url, data=data, headers=headers, method=method)
        try:
            with request.urlopen(req, timeout=self.timeout_sec) as resp:
                body = resp.read()
        except error.HTTPError as exc:
            raise AliasStoreError(f"{method} {path} failed with status {exc.code}") from exc
        except (error.URLError, TimeoutError, ValueError) as exc:
            raise AliasStoreError(f"{method} {path} failed: {exc}") from exc

        if not body:
            return None
        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as exc:
            logger.warning("alias store returned invalid JSON for %s %s", method, path)
            raise AliasStoreError(f"{method} {path} returned invalid JSON") from exc
