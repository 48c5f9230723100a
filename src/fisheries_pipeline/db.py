"""MongoDB helpers.

Centralizes creation of Mongo clients and read access to the source
collections the extracts are exported from.
"""

from __future__ import annotations

from typing import Any, Iterator

import certifi
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database


def get_client(uri: str) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    Args:
        uri: MongoDB connection URI.

    Returns:
        Configured MongoClient instance.
    """
    return MongoClient(
        uri,
        tls=True,
        tlsCAFile=certifi.where(),
        retryWrites=True,
        w="majority",
        maxPoolSize=1,
        serverSelectionTimeoutMS=30000,
        socketTimeoutMS=30000,
        connectTimeoutMS=30000,
    )


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the named Database instance from a MongoClient.

    Args:
        client: PyMongo MongoClient.
        db_name: Database name.

    Returns:
        A Database object.
    """
    return client[db_name]


def iter_documents(
    collection: Collection[dict[str, Any]],
    query: dict[str, Any] | None = None,
    batch_size: int = 5000,
) -> Iterator[dict[str, Any]]:
    """Stream every document of `collection` matching `query`.

    Args:
        collection: Source PyMongo collection.
        query: MongoDB filter (all documents when omitted).
        batch_size: Cursor batch size.

    Yields:
        Documents as dictionaries, `_id` included.
    """
    cursor = collection.find(query or {}).batch_size(batch_size)
    try:
        yield from cursor
    finally:
        cursor.close()
