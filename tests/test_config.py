from __future__ import annotations

from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from parkalert.config import load_config
from parkalert.exceptions import ConfigError

_CONFIG = """
backend:
  base_url: https://parking.example
  token: ${PARKALERT_TEST_TOKEN}
  retry_count: 2
scan:
  user_id: u1
  interval_seconds: 30
  timezone: Asia/Kolkata
notifier:
  kind: expo
  push_token: ExponentPushToken[abc]
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "parkalert.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARKALERT_TEST_TOKEN", "s3cret")

    config = load_config(_write(tmp_path, _CONFIG))

    assert config.backend.base_url == "https://parking.example"
    assert config.backend.token == "s3cret"
    assert config.backend.retry_count == 2
    assert config.backend.timeout_seconds == 30.0
    assert config.scan.user_id == "u1"
    assert config.scan.interval_seconds == 30
    assert config.scan.tzinfo() == ZoneInfo("Asia/Kolkata")
    assert config.notifier.kind == "expo"


def test_defaults(tmp_path: Path) -> None:
    config = load_config(
        _write(tmp_path, "backend:\n  base_url: https://x\nscan:\n  user_id: u1\n")
    )

    assert config.notifier.kind == "log"
    assert config.scan.interval_seconds == 60
    assert config.scan.tzinfo() is None


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "backend: [unclosed",
        "- just\n- a list\n",
        "backend:\n  base_url: https://x\n",
        "backend:\n  base_url: https://x\nscan:\n  user_id: u1\n  timezone: Mars/Olympus\n",
        "backend:\n  base_url: https://x\nscan:\n  user_id: u1\n  interval_seconds: 0\n",
        "backend:\n  base_url: https://x\nscan:\n  user_id: u1\nnotifier:\n  kind: sms\n",
    ],
)
def test_invalid_config(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, text))
