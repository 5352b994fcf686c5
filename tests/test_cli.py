"""Tests for the CLI interface of gcm.

This module contains tests for all command-line arguments and their combinations.
"""

import logging
from unittest.mock import patch

import pytest

from gcm.cli import (
    add_engine_arguments,
    add_generation_arguments,
    add_mode_arguments,
    add_version_argument,
    attempts_type,
    build_parser,
    configure_logging,
    create_argument_parser,
    create_config_from_args,
    main,
)
from gcm.config import Config


@pytest.fixture
def parser():
    """Fixture to create a fresh argument parser for each test."""
    return create_argument_parser()


def test_version_argument(parser, capsys):
    add_version_argument(parser)

    with pytest.raises(SystemExit):
        parser.parse_args(["--version"])
    assert "gcm 1.0.0" in capsys.readouterr().out


def test_mode_arguments(parser):
    add_mode_arguments(parser)

    args = parser.parse_args([])
    assert args.only_message is False
    assert args.verbose is False
    assert args.update is False

    args = parser.parse_args(["--only-message", "--verbose", "--update"])
    assert args.only_message is True
    assert args.verbose is True
    assert args.update is True


def test_engine_arguments(parser):
    add_engine_arguments(parser)

    args = parser.parse_args([])
    assert args.engine == "ollama"
    assert args.chunk_model == "tavernari/git-commit-message:reasoning"
    assert args.merge_model == "tavernari/git-commit-message:merge_commits"

    args = parser.parse_args(["--engine", "g4f", "--g4f-model", "gpt-4o",
                              "--chunk-model", "a:1", "--merge-model", "b:2"])
    assert args.engine == "g4f"
    assert args.g4f_model == "gpt-4o"
    assert args.chunk_model == "a:1"
    assert args.merge_model == "b:2"

    with pytest.raises(SystemExit):
        parser.parse_args(["--engine", "openai"])


def test_generation_arguments(parser):
    add_generation_arguments(parser)

    assert parser.parse_args([]).attempts == 10
    assert parser.parse_args(["-a", "5"]).attempts == 5
    assert parser.parse_args(["--attempts", "1"]).attempts == 1

    with pytest.raises(SystemExit):
        parser.parse_args(["-a", "0"])
    with pytest.raises(SystemExit):
        parser.parse_args(["-a", "11"])
    with pytest.raises(SystemExit):
        parser.parse_args(["-a", "many"])


def test_attempts_type():
    assert attempts_type("10") == 10
    with pytest.raises(Exception):
        attempts_type("-1")


def test_help_exits_without_running(capsys):
    with patch("gcm.cli.run") as mock_run:
        with pytest.raises(SystemExit) as excinfo:
            main(["--help"])

    assert excinfo.value.code == 0
    mock_run.assert_not_called()
    out = capsys.readouterr().out
    assert "--only-message" in out
    assert "Splits changes into chunks" in out


def test_create_config_from_args():
    args = build_parser().parse_args(["--only-message", "--verbose", "-a", "4", "--engine", "g4f"])

    config = create_config_from_args(args)

    assert isinstance(config, Config)
    assert config.only_message is True
    assert config.verbose is True
    assert config.attempts == 4
    assert config.engine == "g4f"


def test_main_runs_with_config():
    with patch("gcm.cli.run", return_value=0) as mock_run:
        assert main(["--only-message"]) == 0

    config = mock_run.call_args.args[0]
    assert config.only_message is True


def test_main_propagates_exit_status():
    with patch("gcm.cli.run", return_value=1):
        assert main([]) == 1


def test_main_keyboard_interrupt():
    with patch("gcm.cli.run", side_effect=KeyboardInterrupt):
        assert main([]) == 130


def test_main_unexpected_error():
    with patch("gcm.cli.run", side_effect=RuntimeError("boom [x]")):
        assert main([]) == 1


def test_main_unexpected_error_verbose_reraises():
    with patch("gcm.cli.run", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            main(["--verbose"])


@pytest.mark.parametrize("verbose,level", [(False, logging.WARNING), (True, logging.DEBUG)])
def test_configure_logging(verbose, level):
    configure_logging(verbose)
    assert logging.getLogger().level == level
