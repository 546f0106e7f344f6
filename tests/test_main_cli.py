import sys
from pathlib import Path

import httpx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import main  # noqa: E402
from main import _parse_args  # noqa: E402


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "9000"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9000


def test_list_users_subcommand_available() -> None:
    args = _parse_args(["list-users", "--token", "abc"])
    assert args.command == "list-users"
    assert args.token == "abc"


def test_list_users_prints_table(monkeypatch, capsys) -> None:
    captured = {}

    def fake_get(url, headers, timeout):
        captured["url"] = url
        captured["headers"] = headers
        return httpx.Response(
            200,
            json=[
                {
                    "id": "6f1c2b1e-0000-4000-8000-000000000001",
                    "email": "jane.doe@example.com",
                    "fullName": "Jane Doe",
                    "createdAt": "2026-01-01T00:00:00Z",
                }
            ],
        )

    monkeypatch.setattr(main.httpx, "get", fake_get)

    exit_code = main.main(["list-users", "--service-url", "http://svc:8080/", "--token", "abc"])

    assert exit_code == 0
    assert captured["url"] == "http://svc:8080/api/users"
    assert captured["headers"] == {"Authorization": "Bearer abc"}
    output = capsys.readouterr().out
    assert "1 user(s) found" in output
    assert "jane.doe@example.com" in output


def test_list_users_requires_token(monkeypatch, capsys) -> None:
    monkeypatch.delenv("USER_MANAGEMENT_CLI_TOKEN", raising=False)

    assert main.main(["list-users"]) == 1
    assert "No API token available" in capsys.readouterr().out


def test_list_users_reports_rejected_token(monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        main.httpx,
        "get",
        lambda url, headers, timeout: httpx.Response(401, json={"error": "Unauthorized"}),
    )

    assert main.main(["list-users", "--token", "wrong"]) == 1
    assert "Authentication failed" in capsys.readouterr().out
