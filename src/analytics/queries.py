"""Run independent read queries concurrently.

Each query gets its own worker thread and therefore its own database
connection; there is no shared snapshot across queries.
"""
from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from django.conf import settings
from django.db import connections

logger = logging.getLogger("uniqverse")


def _run_in_worker(query):
    try:
        return query()
    finally:
        connections.close_all()


def run_concurrently(queries: dict, max_workers: int | None = None) -> dict:
    """Evaluate every callable in *queries* and return results by name.

    All-or-nothing: the first failing query's exception is re-raised and no
    partial result is returned.  With a single worker the queries run inline,
    in order, on the caller's connection.
    """
    if max_workers is None:
        max_workers = settings.ANALYTICS_QUERY_WORKERS
    max_workers = max(1, min(max_workers, len(queries) or 1))

    if max_workers == 1:
        return {name: query() for name, query in queries.items()}

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="analytics") as executor:
        futures = {executor.submit(_run_in_worker, query): name for name, query in queries.items()}
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in done:
            exc = future.exception()
            if exc is not None:
                for other in pending:
                    other.cancel()
                logger.error("Analytics query %s failed: %s", futures[future], exc)
                raise exc

    return {name: future.result() for future, name in futures.items()}
