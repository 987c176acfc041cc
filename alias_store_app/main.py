"""Alias store service backing the spreadsheet cleaner (PostgreSQL).

Run locally:
  uvicorn alias_store_app.main:app --reload --port 8100
"""

from __future__ import annotations

import os

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from pydantic import BaseModel, Field
import psycopg
from psycopg.rows import dict_row

DATABASE_URL = os.getenv("DATABASE_URL")
STORE_TOKEN = os.getenv("ALIAS_STORE_TOKEN")

app = FastAPI(title="Alias Store", version="1.0.0")


class SizeStatOut(BaseModel):
    value: str
    count: int = 0


class SizeIn(BaseModel):
    value: str = Field(min_length=1, max_length=50)


class SizeAliasIn(BaseModel):
    aliasText: str = Field(min_length=1, max_length=255)
    mappedSize: str = Field(min_length=1, max_length=50)


class ProductAliasIn(BaseModel):
    aliasText: str = Field(min_length=1)
    mappedProductName: str = Field(min_length=1)


def _require_database_url() -> str:
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is required for alias_store_app")
    return DATABASE_URL


def _conn() -> psycopg.Connection:
    return psycopg.connect(_require_database_url(), row_factory=dict_row)


def _clean(value: str) -> str:
    # PostgreSQL text cannot hold NUL bytes.
    return value.replace("\0", "").strip()


def _init_db() -> None:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                create table if not exists known_sizes (
                  id bigserial primary key,
                  label varchar(50) not null unique,
                  usage_count integer not null default 0,
                  created_at timestamptz not null default now()
                )
                """
            )
            cur.execute(
                """
                create table if not exists size_aliases (
                  id bigserial primary key,
                  alias_text varchar(255) not null unique,
                  mapped_size varchar(50) not null,
                  created_at timestamptz not null default now()
                )
                """
            )
            cur.execute(
                """
                create table if not exists product_aliases (
                  id bigserial primary key,
                  alias_text text not null unique,
                  mapped_product_name text not null,
                  created_at timestamptz not null default now()
                )
                """
            )
            cur.execute(
                """
                create table if not exists product_names (
                  id bigserial primary key,
                  name text not null unique
                )
                """
            )
        conn.commit()


@app.on_event("startup")
def startup() -> None:
    _init_db()


def _verify_token(x_alias_store_token: str | None = Header(default=None)) -> None:
    if STORE_TOKEN and x_alias_store_token != STORE_TOKEN:
        raise HTTPException(status_code=401, detail="invalid alias store token")


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/sizes/stats", response_model=list[SizeStatOut])
def size_stats(_: None = Depends(_verify_token)) -> list[SizeStatOut]:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute("select label, usage_count from known_sizes order by usage_count desc, label asc")
            rows = cur.fetchall()
    return [SizeStatOut(value=row["label"], count=int(row["usage_count"] or 0)) for row in rows]


@app.post("/sizes")
def create_size(size: SizeIn, _: None = Depends(_verify_token)) -> dict[str, bool]:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                "insert into known_sizes (label) values (%s) on conflict (label) do nothing",
                (_clean(size.value),),
            )
        conn.commit()
    return {"ok": True}


@app.get("/sizes/aliases")
def size_aliases(_: None = Depends(_verify_token)) -> list[dict[str, str]]:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute("select alias_text, mapped_size from size_aliases order by id asc")
            rows = cur.fetchall()
    return [{"aliasText": row["alias_text"], "mappedSize": row["mapped_size"]} for row in rows]


@app.post("/sizes/aliases")
def create_size_alias(alias: SizeAliasIn, _: None = Depends(_verify_token)) -> dict[str, bool]:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                insert into size_aliases (alias_text, mapped_size)
                values (%s, %s)
                on conflict (alias_text) do update set mapped_size = excluded.mapped_size
                """,
                (_clean(alias.aliasText), _clean(alias.mappedSize)),
            )
        conn.commit()
    return {"ok": True}


@app.get("/products/aliases")
def product_aliases(_: None = Depends(_verify_token)) -> list[dict[str, str]]:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute("select alias_text, mapped_product_name from product_aliases order by id asc")
            rows = cur.fetchall()
    return [
        {"aliasText": row["alias_text"], "mappedProductName": row["mapped_product_name"]}
        for row in rows
    ]


@app.post("/products/aliases")
def create_product_alias(alias: ProductAliasIn, _: None = Depends(_verify_token)) -> dict[str, bool]:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                insert into product_aliases (alias_text, mapped_product_name)
                values (%s, %s)
                on conflict (alias_text) do update set mapped_product_name = excluded.mapped_product_name
                """,
                (_clean(alias.aliasText), _clean(alias.mappedProductName)),
            )
        conn.commit()
    return {"ok": True}


@app.get("/products/names")
def product_names(_: None = Depends(_verify_token)) -> list[str]:
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute("select name from product_names order by name asc")
            rows = cur.fetchall()
    return [row["name"] for row in rows]


@app.get("/products/search")
def search_products(
    q: str = Query(default=""),
    limit: int = Query(default=20, ge=1, le=100),
    _: None = Depends(_verify_token),
) -> list[str]:
    text = _clean(q)
    if not text:
        return []
    pattern = "%" + text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
    with _conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select name from product_names
                where name ilike %s
                order by (name ilike %s) desc, name asc
                limit %s
                """,
                (pattern, pattern[1:], limit),
            )
            rows = cur.fetchall()
    return [row["name"] for row in rows]
