from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scripts.generate_token import generate_token, main  # noqa: E402
from user_management.security import TokenValidator  # noqa: E402


def test_generated_tokens_are_unique_and_accepted() -> None:
    first = generate_token()
    second = generate_token()

    assert first != second
    assert TokenValidator([first]).is_valid(first)


def test_short_tokens_are_refused() -> None:
    with pytest.raises(ValueError):
        generate_token(8)


def test_main_prints_requested_tokens(capsys) -> None:
    assert main(["--count", "2"]) == 0
    lines = [line for line in capsys.readouterr().out.splitlines() if line and " " not in line]
    assert len(lines) == 2
