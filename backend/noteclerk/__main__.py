"""Run the NoteClerk API with uvicorn on the configured address."""

import uvicorn

from noteclerk.app import create_app
from noteclerk.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.SERVER_IP, port=int(settings.SERVER_PORT))


if __name__ == "__main__":
    main()
