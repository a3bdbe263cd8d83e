import json
import logging
import sys

import pytest

from fmrealign.logging_setup import JsonLinesFormatter, setup_logger


@pytest.fixture
def package_logger():
    yield
    logger = logging.getLogger("fmrealign")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_json_lines_file(tmp_path, package_logger):
    log_path = tmp_path / "logs" / "realign.jsonl"
    logger = setup_logger(log_path=log_path, level="DEBUG")

    logging.getLogger("fmrealign.realign.brick").info("Loaded", extra={"n_vols": 5})
    logging.getLogger("fmrealign.realign.brick").debug("Staged")
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text().strip().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["level"] == "INFO"
    assert first["name"] == "fmrealign.realign.brick"
    assert first["message"] == "Loaded"
    assert first["n_vols"] == 5


def test_console_output(capsys, package_logger):
    setup_logger(verbose=True)
    logging.getLogger("fmrealign.test").warning("careful")
    assert "[WARNING] careful" in capsys.readouterr().out


def test_repeated_setup_replaces_handlers(tmp_path, package_logger):
    setup_logger(log_path=tmp_path / "a.jsonl", verbose=True)
    logger = setup_logger(log_path=tmp_path / "b.jsonl", verbose=True)
    assert len(logger.handlers) == 2


def test_formatter_includes_exception():
    try:
        raise ValueError("bad value")
    except ValueError:
        record = logging.LogRecord(
            "fmrealign", logging.ERROR, __file__, 1, "failed", None,
            exc_info=sys.exc_info(),
        )
    entry = json.loads(JsonLinesFormatter().format(record))
    assert entry["message"] == "failed"
    assert "bad value" in entry["exception"]
