"""Tests for the command line entry point."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from practice_exam import cli
from practice_exam.generator import GenerationError
from practice_exam.persistence import JsonFileHistoryStore


@pytest.fixture(autouse=True)
def logging_setup():
    """Keep pytest's log capture intact."""
    with patch("practice_exam.cli.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def history_file(tmp_path):
    return tmp_path / "history.json"


class TestStats:
    def test_empty_history(self, history_file, capsys):
        exit_code = cli.main(["--history-file", str(history_file), "stats"])

        out = capsys.readouterr().out
        assert exit_code == cli.EXIT_SUCCESS
        assert "Tests taken:   0" in out
        assert "Average score: 0%" in out
        assert "Knowledge breakdown" not in out

    def test_breakdown(self, history_file, capsys, make_result):
        JsonFileHistoryStore(history_file).save(
            [make_result(1, [True, True, False]), make_result(2, [False])]
        )

        cli.main(["--history-file", str(history_file), "stats"])

        out = capsys.readouterr().out
        assert "Tests taken:   2" in out
        assert "Pass rate:     0%" in out
        assert "(2/4)" in out
        assert "Focus next on:" in out


class TestHistory:
    def test_lists_results(self, history_file, capsys, make_result):
        JsonFileHistoryStore(history_file).save([make_result(3, [True] * 7 + [False] * 3)])

        cli.main(["--history-file", str(history_file), "history"])

        out = capsys.readouterr().out
        assert "Test #3" in out
        assert "7/10 (70%)  PASS" in out

    def test_no_results(self, history_file, capsys):
        cli.main(["--history-file", str(history_file), "history"])
        assert "No tests taken yet." in capsys.readouterr().out


class TestGenerate:
    def test_missing_api_key(self, history_file):
        with patch.object(cli.settings, "google_api_key", None):
            exit_code = cli.main(["--history-file", str(history_file), "generate"])

        assert exit_code == cli.EXIT_CONFIG_ERROR

    def test_writes_questions(self, history_file, tmp_path, sample_questions):
        output = tmp_path / "exam.json"
        with patch.object(cli.settings, "google_api_key", "key"), patch(
            "practice_exam.cli.GoogleProvider"
        ), patch(
            "practice_exam.cli.QuestionGenerator.generate_practice_test",
            new=AsyncMock(return_value=sample_questions),
        ):
            exit_code = cli.main(
                ["generate", "--test-id", "2", "--output", str(output)]
            )

        assert exit_code == cli.EXIT_SUCCESS
        data = json.loads(output.read_text())
        assert [q["id"] for q in data] == [1, 2, 3]
        assert "questionText" in data[0]

    def test_generation_failure(self):
        with patch.object(cli.settings, "google_api_key", "key"), patch(
            "practice_exam.cli.GoogleProvider"
        ), patch(
            "practice_exam.cli.QuestionGenerator.generate_practice_test",
            new=AsyncMock(side_effect=GenerationError("Batch A failed")),
        ):
            exit_code = cli.main(["generate"])

        assert exit_code == cli.EXIT_GENERATION_FAILURE

    def test_rejects_unknown_test_id(self):
        with pytest.raises(SystemExit):
            cli.main(["generate", "--test-id", "11"])


class TestLoggingOptions:
    def test_log_file_option_enables_file_logging(self, logging_setup, history_file, tmp_path):
        log_file = tmp_path / "logs" / "exam.log"

        cli.main(["--history-file", str(history_file), "--log-file", str(log_file), "history"])

        kwargs = logging_setup.call_args.kwargs
        assert kwargs["log_file"] == str(log_file)
        assert kwargs["enable_file_logging"] is True

    def test_production_logs_json_to_configured_file(self, logging_setup, history_file):
        with patch.object(cli.settings, "env", "production"), patch.object(
            cli.settings, "log_file", "/var/log/exam.log"
        ):
            cli.main(["--history-file", str(history_file), "history"])

        kwargs = logging_setup.call_args.kwargs
        assert kwargs["log_file"] == "/var/log/exam.log"
        assert kwargs["enable_file_logging"] is True
        assert kwargs["json_format"] is True

    def test_development_logs_to_console_only(self, logging_setup, history_file):
        with patch.object(cli.settings, "env", "development"):
            cli.main(["--history-file", str(history_file), "--verbose", "history"])

        kwargs = logging_setup.call_args.kwargs
        assert kwargs["enable_file_logging"] is False
        assert kwargs["log_level"] == "DEBUG"
