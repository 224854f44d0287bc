"""
Run the Barista Order Service: ``python -m barista``.

Starts uvicorn on the admin API address; the app's lifespan opens the TCP
order counter alongside it.
"""

import uvicorn

from barista.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "barista.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
