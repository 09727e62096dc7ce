import logging

from config import load_settings
from database import create_session_factory
from seed import init_db


def main() -> None:
    """
    Drop every table and reload the sample products and users.

    This is a maintenance script intended for local/dev use to put the
    lab back into its starting state between exercises.
    """
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    init_db(create_session_factory(settings.database_url), reset=True)
    print(f"Database reset: {settings.database_url}")


if __name__ == "__main__":
    main()
