import json
from datetime import datetime, timezone

import pytest

import main
from config.app_config import PROVIDER_ENV_VAR
from config.constants import ACCESS_TOKEN_ENV_VAR
from core.calendar.models import CanonicalEvent


NOW = "2024-01-10T12:00:00Z"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(PROVIDER_ENV_VAR, raising=False)
    monkeypatch.delenv(ACCESS_TOKEN_ENV_VAR, raising=False)


@pytest.fixture
def base_args(tmp_path):
    return ["--config-dir", str(tmp_path / "config"), "--log-dir", str(tmp_path / "logs")]


@pytest.fixture
def context_file(tmp_path, make_event):
    path = tmp_path / "context.json"
    path.write_text(json.dumps({
        "calendar": {
            "events": [
                make_event("Study Group", "2024-01-11T14:00:00Z", "2024-01-11T15:30:00Z"),
                make_event("Lecture", "2024-01-09T10:00:00Z", "2024-01-09T11:30:00Z"),
                make_event("Dropped", "2024-01-09T08:00:00Z", status="cancelled"),
            ]
        }
    }), encoding="utf-8")
    return path


def test_json_output(base_args, context_file, capsys):
    code = main.main(base_args + [
        "--provider", "host_context", "--context-file", str(context_file), "--now", NOW, "--json",
    ])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == [
        {"title": "Lecture", "startTime": "2024-01-09T10:00:00Z", "endTime": "2024-01-09T11:30:00Z"},
        {"title": "Study Group", "startTime": "2024-01-11T14:00:00Z", "endTime": "2024-01-11T15:30:00Z"},
    ]


def test_text_output(base_args, context_file, capsys):
    code = main.main(base_args + [
        "--provider", "host_context", "--context-file", str(context_file), "--now", NOW,
    ])

    lines = capsys.readouterr().out.splitlines()
    assert code == 0
    assert lines[0] == "Lecture"
    assert lines[2] == "Study Group"
    assert lines[1].startswith("  ") and " - " in lines[1]


def test_no_events(base_args, tmp_path, capsys):
    empty = tmp_path / "empty.json"
    empty.write_text("{}", encoding="utf-8")

    code = main.main(base_args + [
        "--provider", "host_context", "--context-file", str(empty), "--now", NOW,
    ])

    assert code == 0
    assert capsys.readouterr().out.strip() == main.NO_EVENTS_MESSAGE


def test_missing_token_fails(base_args, capsys):
    code = main.main(base_args + ["--provider", "google", "--now", NOW])

    assert code == 1
    assert "Failed to load calendar events: No Google access token found" in capsys.readouterr().err


def test_invalid_now(base_args, capsys):
    assert main.main(base_args + ["--provider", "mock", "--now", "yesterday"]) == 2
    assert "Invalid --now value" in capsys.readouterr().err


def test_missing_context_file(base_args, tmp_path, capsys):
    code = main.main(base_args + [
        "--provider", "host_context", "--context-file", str(tmp_path / "missing.json"),
    ])

    assert code == 2
    assert "Failed to read context file" in capsys.readouterr().err


def test_unknown_provider_choice(base_args):
    with pytest.raises(SystemExit) as exc_info:
        main.main(base_args + ["--provider", "outlook"])

    assert exc_info.value.code == 2


def test_invalid_environment_provider(base_args, monkeypatch, capsys):
    monkeypatch.setenv(PROVIDER_ENV_VAR, "outlook")

    assert main.main(base_args + ["--provider", "mock"]) == 2
    assert "Invalid configuration" in capsys.readouterr().err


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"calendar": {"lookahead_days": 0}}),
    json.dumps({"calendar": "google"}),
    json.dumps(["calendar"]),
])
def test_invalid_config_file(base_args, tmp_path, capsys, content):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "app_config.json").write_text(content, encoding="utf-8")

    assert main.main(base_args + ["--provider", "mock", "--now", NOW]) == 2
    assert "Invalid configuration" in capsys.readouterr().err


def test_render_events_formats_spans():
    start = datetime(2024, 1, 9, 10, tzinfo=timezone.utc)
    end = datetime(2024, 1, 9, 11, 30, tzinfo=timezone.utc)
    events = [
        CanonicalEvent("Lecture", "2024-01-09T10:00:00Z", "2024-01-09T11:30:00Z"),
        CanonicalEvent("Exam day", "2024-01-09T10:00:00Z", "2024-01-09T10:00:00Z"),
    ]

    assert main.render_events(events).splitlines() == [
        "Lecture",
        f"  {main.format_datetime(start)} - {main.format_datetime(end)}",
        "Exam day",
        f"  {main.format_datetime(start)}",
    ]


def test_render_no_events():
    assert main.render_events([]) == main.NO_EVENTS_MESSAGE
