"""
api_resources demo entry point.

Lists one page of a collection endpoint through the cached API layer, then
fetches it again to show the cache hit.

    API_RESOURCES_BASE_URL=https://api.example.com python main.py /users 1
"""

import sys
from typing import ClassVar

from loguru import logger

from api_resources import ApiService, BaseApiModel
from api_resources.services import LogNotifier


class Record(BaseApiModel):
    """Untyped record; every attribute from the API is kept."""

    endpoint: ClassVar[str] = "/users"


def main(argv: list[str]) -> int:
    """Main function."""
    endpoint = argv[1] if len(argv) > 1 else Record.endpoint
    page = int(argv[2]) if len(argv) > 2 else 1

    Record.endpoint = endpoint

    with ApiService(notifier=LogNotifier(), debug=True) as service:
        Record.api_service = service
        logger.info(f"Listing {service.transport.url_for(endpoint)} (page {page})")

        rows = Record.get_rows_paginated(current_page=page)
        logger.info(
            f"Got {len(rows)} of {rows.total} records "
            f"(page {rows.current_page}/{rows.last_page})"
        )
        for row in rows:
            logger.info(f"  {row.get_key()}: {row.get_attributes()}")

        # Second read is served from the cache
        Record.get_rows_paginated(current_page=page)
        logger.info(f"Cache stats: {service.get_cache_stats()}")

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
