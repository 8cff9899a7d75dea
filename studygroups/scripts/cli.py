"""
A simple CLI for running the server.
"""

import sys

import uvicorn


def main():
    try:
        run = sys.argv[1] == "run"
        setup = sys.argv[1] == "setup"
    except IndexError:
        print("Only supported commands are studygroups run, or studygroups setup")
        exit(1)

    from studygroups.config.settings import Settings

    settings = Settings()

    if setup:
        settings.sync_manager().create_all()

        print(f"Tables created in {settings.database_type} database")
        exit(0)

    if run:
        uvicorn.run(
            "studygroups.api.app:app", host=settings.hostname, port=settings.port
        )
        exit(0)

    print(f"Unknown command {sys.argv[1]}")
    exit(1)
