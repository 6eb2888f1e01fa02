"""Main entry point for the gym admin server.

Configured as the ``gym-admin-server`` script in pyproject.toml.
"""

import argparse

import uvicorn


def main() -> None:
    """Start the server using uvicorn.

    Configuration:
        - host: Configurable via --host (default: "0.0.0.0")
        - port: Configurable via --port (default: 8000)

    Usage:
        gym-admin-server --port 8080
    """
    parser = argparse.ArgumentParser(description="Start the gym admin server")
    parser.add_argument(
        "--host", default="0.0.0.0", help="Interface to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port", type=int, default=8000, help="Port to run the server on (default: 8000)"
    )
    args = parser.parse_args()

    uvicorn.run(
        "gym_admin.server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
    )


if __name__ == "__main__":
    main()
