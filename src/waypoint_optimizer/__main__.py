"""Run the API with uvicorn: ``python -m waypoint_optimizer``."""

import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run(
        "waypoint_optimizer.main:app",
        host=settings.host,
        port=settings.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
