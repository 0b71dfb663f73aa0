#!/usr/bin/env python3
"""Rebuild the program search index from the database.

Usage:
  python3 scripts/reindex_search.py            # upsert every program
  python3 scripts/reindex_search.py --clear    # drop all documents first

Requires MEILISEARCH_HOST to be set; otherwise there is nothing to do.
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from millpoint.config.settings import settings
from millpoint.database.connection import Database
from millpoint.services import ProgramService, SearchClient, SearchIndexer
from millpoint.utils.file_storage import FileStorage


def main():
    parser = argparse.ArgumentParser(description='Rebuild the program search index')
    parser.add_argument('--clear', action='store_true', help='Remove all documents before reindexing')
    args = parser.parse_args()

    search_client = SearchClient(
        host=settings.MEILISEARCH_HOST,
        api_key=settings.MEILISEARCH_API_KEY,
        index_name=settings.SEARCH_INDEX_NAME,
        timeout=settings.SEARCH_TIMEOUT_SECONDS,
    )
    if not search_client.enabled:
        print("MEILISEARCH_HOST is not set; search index disabled")
        return

    database = Database(settings.DATABASE_URL).open()
    search_client.open()
    indexer = SearchIndexer(search_client, settings.SEARCH_RETRY_ATTEMPTS, settings.SEARCH_RETRY_BACKOFF_SECONDS)
    try:
        service = ProgramService(database, search_client, indexer, FileStorage(settings.STORAGE_PATH))
        count = service.reindex_all(clear=args.clear)
        indexer.drain()
        print(f"Reindexed {count} programs")
    finally:
        search_client.close()
        database.close()


if __name__ == '__main__':
    main()
