"""
Run the API with uvicorn:

  python -m auth_service.server
"""

import uvicorn

from auth_service.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "auth_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.APP_ENV == "dev" and settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
