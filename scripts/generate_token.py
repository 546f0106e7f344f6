"""Generate API tokens for authenticating against the user management service."""

from __future__ import annotations

import argparse
import secrets


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a user management API token")
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of tokens to generate (default: 1)",
    )
    parser.add_argument(
        "--bytes",
        type=int,
        default=32,
        help="Random bytes per token before encoding (default: 32)",
    )
    return parser.parse_args(argv)


def generate_token(num_bytes: int = 32) -> str:
    if num_bytes < 16:
        raise ValueError("Tokens must contain at least 16 random bytes")
    return secrets.token_urlsafe(num_bytes)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(list(argv) if argv is not None else None)

    tokens = [generate_token(args.bytes) for _ in range(max(args.count, 1))]
    print("Generated API token(s):")
    for token in tokens:
        print(token)
    print(
        "\nAdd them to authentication.tokens in config/settings.yaml or to "
        "USER_MANAGEMENT_API_TOKENS; they are not stored anywhere else."
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
