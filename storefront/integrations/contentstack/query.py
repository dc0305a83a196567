"""
Query-string helpers for the Contentstack entries search API.

Contentstack takes the filter as a single JSON-encoded `query` parameter:
  {"uid": {"$in": [...]}}
  {"category": "sofa"}
  {"$or": [{"category": {"$regex": "sofa", "$options": "i"}}, ...]}
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlencode

MIN_LIMIT = 1
MAX_LIMIT = 1000
DEFAULT_LIMIT = 100

Query = Dict[str, Any]


def in_(values: Iterable[Any]) -> Dict[str, List[Any]]:
    return {"$in": list(values)}


def regex(pattern: str, case_insensitive: bool = True) -> Dict[str, str]:
    clause = {"$regex": pattern}
    if case_insensitive:
        clause["$options"] = "i"
    return clause


def or_(*clauses: Query) -> Query:
    return {"$or": [dict(c) for c in clauses]}


def sort_key(field: str, descending: bool = False) -> str:
    return f"-{field}" if descending else field


def clamp_limit(limit: Any) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = DEFAULT_LIMIT
    return max(MIN_LIMIT, min(value, MAX_LIMIT))


def build_search_params(
    query: Optional[Query] = None,
    skip: int = 0,
    limit: int = DEFAULT_LIMIT,
    sort: Optional[str] = None,
    include_count: bool = False,
) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    if query:
        params.append(("query", json.dumps(query, separators=(",", ":"))))
    if skip and skip > 0:
        params.append(("skip", str(int(skip))))
    params.append(("limit", str(clamp_limit(limit))))
    if sort:
        params.append(("sort", sort))
    if include_count:
        params.append(("include_count", "true"))
    return params


def entries_endpoint(content_type: str) -> str:
    return f"/content_types/{content_type}/entries"


def build_search_endpoint(content_type: str, query: Optional[Query] = None, **options: Any) -> str:
    params = build_search_params(query, **options)
    return f"{entries_endpoint(content_type)}?{urlencode(params)}"
