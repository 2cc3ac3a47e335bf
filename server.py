import logging
import os

import uvicorn

from mentor.core.config import get_settings


def main() -> None:
    settings = get_settings()
    port = int(os.environ.get("PORT", 8000))
    reload = os.environ.get("ENV", "dev") == "dev"
    host = "127.0.0.1" if reload else "0.0.0.0"
    logging.getLogger("server").info(
        "server_start app=%s host=%s port=%s reload=%s", settings.app_name, host, port, reload
    )
    uvicorn.run(
        "mentor.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
