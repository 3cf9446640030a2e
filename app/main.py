import uvicorn
from dotenv import load_dotenv

from infrastructure.services import get_settings
from server import server

server_app = server.handler

load_dotenv()


def main():
    """Run the HTTP server until SIGINT/SIGTERM.

    On shutdown uvicorn stops accepting connections, gives in-flight requests
    SHUTDOWN_GRACE_SECONDS to finish, then closes the rest.
    """
    settings = get_settings()
    uvicorn.run(
        server_app,
        host=settings.server.API_HOST,
        port=settings.server.API_PORT,
        timeout_graceful_shutdown=settings.server.SHUTDOWN_GRACE_SECONDS,
        log_config=None,
    )


if __name__ == "__main__":
    main()
