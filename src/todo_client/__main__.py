"""Allow running the client with ``python -m todo_client``."""

from todo_client.cli.app import main

if __name__ == "__main__":
    main()
