import logging

import pytest

from dipolarrsa import config
from dipolarrsa.__main__ import build_parser, cli
from dipolarrsa.logging_config import setup_logging
from dipolarrsa.model.io import IOManager


def test_single_run_prints_count(capsys):
    assert cli(["single", "--length", "1", "--p", "1.0", "--max-rounds", "10"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert "dipoles deposited" in captured.err


def test_scan_writes_results(tmp_path):
    output = str(tmp_path / "cli.h5")
    code = cli([
        "scan", "--start", "1", "--stop", "3", "--step", "1",
        "--replicas", "5", "--p", "1.0", "--max-rounds", "100", "--seed", "3", "--output", output,
    ])
    assert code == 0

    state = IOManager.load_scan(output)
    assert state.lengths.tolist() == [1.0, 2.0, 3.0]
    assert state.means.tolist()[0] == 1.0
    assert state.means.tolist()[2] == 3.0


def test_scan_defaults_to_output_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(config.OUTPUT_DIR_ENV, str(tmp_path))
    code = cli(["scan", "--start", "1", "--stop", "1", "--step", "1", "--replicas", "2", "--max-rounds", "10"])
    assert code == 0
    assert (tmp_path / config.DEFAULT_RESULTS_FILENAME).exists()


def test_invalid_probability_exits_with_error(capsys):
    assert cli(["single", "--length", "2", "--p", "1.5"]) == 2
    assert "p_plus_minus" in capsys.readouterr().err


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_setup_logging_does_not_duplicate_handlers(tmp_path):
    log_file = str(tmp_path / "run.log")
    setup_logging(level=logging.DEBUG, log_file=log_file)
    setup_logging(level=logging.INFO)
    logger = logging.getLogger("dipolarrsa")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
