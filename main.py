"""Command-line interface for the user management service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence


def _running_in_virtualenv() -> bool:
    """Return ``True`` when the current interpreter is executing inside a venv."""

    base_prefix = getattr(sys, "base_prefix", sys.prefix)
    return sys.prefix != base_prefix


def _bootstrap_virtualenv() -> None:
    """Re-exec the script using the bundled virtualenv interpreter when available."""

    if _running_in_virtualenv():
        return

    root = Path(__file__).resolve().parent
    venv_dir = root / ".venv"
    if not venv_dir.is_dir():
        return

    candidates = (
        venv_dir / "bin" / "python",
        venv_dir / "bin" / "python3",
        venv_dir / "Scripts" / "python.exe",
        venv_dir / "Scripts" / "python",
    )

    script = str(Path(__file__).resolve())
    for candidate in candidates:
        if candidate.exists():
            os.execv(str(candidate), [str(candidate), script, *sys.argv[1:]])


if __name__ == "__main__":
    _bootstrap_virtualenv()

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Execute `pip install -e .` to install dependencies."
    ) from exc

from user_management.config import load_settings

logger = logging.getLogger("usermanagement.main")

_DEFAULT_SERVICE_URL = "http://localhost:8080"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User management service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML settings file (default: USER_MANAGEMENT_CONFIG or config/settings.yaml)",
    )
    serve_parser.add_argument(
        "--ssl-certfile",
        default=None,
        help="Path to the TLS certificate chain in PEM format",
    )
    serve_parser.add_argument(
        "--ssl-keyfile",
        default=None,
        help="Path to the TLS private key in PEM format",
    )

    list_parser = subparsers.add_parser(
        "list-users", help="Print the users registered with a running service"
    )
    list_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Base URL of a running service (default: {_DEFAULT_SERVICE_URL})",
    )
    list_parser.add_argument(
        "--token",
        default=None,
        help="API token to authenticate with. Defaults to USER_MANAGEMENT_CLI_TOKEN.",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "list-users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(
    *,
    host: str,
    port: int,
    config_path: str | None,
    ssl_certfile: str | None,
    ssl_keyfile: str | None,
) -> None:
    from user_management.application import create_application
    import uvicorn

    if bool(ssl_certfile) ^ bool(ssl_keyfile):
        raise SystemExit("Both --ssl-certfile and --ssl-keyfile must be provided together.")

    protocol = "https" if ssl_certfile and ssl_keyfile else "http"
    logger.info("Starting user management API on %s://%s:%s", protocol, host, port)

    app = create_application(config_path=config_path)
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="info",
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
    )


def _list_users(service_url: str | None, token: str | None) -> int:
    base_url = service_url or _DEFAULT_SERVICE_URL
    token = token or os.getenv("USER_MANAGEMENT_CLI_TOKEN")
    if not token:
        print(
            "No API token available. Pass --token or set the USER_MANAGEMENT_CLI_TOKEN "
            "environment variable."
        )
        return 1

    endpoint = base_url.rstrip("/") + "/api/users"

    try:
        response = httpx.get(
            endpoint,
            headers={"Authorization": f"Bearer {token}"},
            timeout=10.0,
        )
    except httpx.HTTPError as exc:
        print(f"Failed to contact user management service: {exc}")
        return 1

    if response.status_code == 401:
        print("Authentication failed. Verify the configured API token.")
        return 1
    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        users = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    if not users:
        print("No users are currently registered.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':<36}  {'Name':<24}  {'Email':<32}  Created")
    print("-" * 110)
    for user in users:
        print(
            f"{user.get('id', '?'):<36}  {user.get('fullName', ''):<24}  "
            f"{user.get('email', ''):<32}  {user.get('createdAt', '')}"
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    level = logging.INFO
    if args.command == "serve":
        config_path = Path(args.config).expanduser() if args.config else None
        level = getattr(logging, load_settings(config_path).log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if args.command == "serve":
        _serve(
            host=args.host,
            port=args.port,
            config_path=args.config,
            ssl_certfile=args.ssl_certfile,
            ssl_keyfile=args.ssl_keyfile,
        )
        return 0
    if args.command == "list-users":
        return _list_users(args.service_url, args.token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
