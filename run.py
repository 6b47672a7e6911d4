#!/usr/bin/env python
"""Start the ledger service with uvicorn using the configured host and port."""

import uvicorn

from bakery_ledger.config import settings


def main() -> None:
    uvicorn.run(
        "bakery_ledger.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
