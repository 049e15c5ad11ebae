from __future__ import annotations

import uvicorn

from afy_api.shared.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "afy_api.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
