"""Tests for logging setup, id minting and process configuration."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

import quillwork
from quillwork.model.document import Document
from quillwork.model.transaction import Transaction
from quillwork.services.settings import Settings
from quillwork.utils import ids
from quillwork.utils import logging as logging_utils


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch: pytest.MonkeyPatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(logging_utils, "_CONFIGURED", False)
    monkeypatch.setattr(logging_utils, "_LOG_PATH", None)
    monkeypatch.setattr(ids, "_ID_LENGTH", ids._ID_LENGTH)
    yield
    # Drop the handlers installed by setup_logging; pytest manages its own.
    for handler in list(root.handlers):
        if isinstance(handler, RotatingFileHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.captureWarnings(False)


def test_setup_logging_writes_to_file(tmp_path: Path) -> None:
    log_path = logging_utils.setup_logging("debug", log_dir=tmp_path, console=False)

    logging_utils.get_logger("quillwork.test").debug("hello file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_path == tmp_path / "quillwork.log"
    assert logging_utils.get_log_path() == log_path
    assert "hello file" in log_path.read_text(encoding="utf-8")
    assert logging.getLogger("markdown_it").level == logging.WARNING


def test_setup_logging_is_idempotent_without_force(tmp_path: Path) -> None:
    first = logging_utils.setup_logging(log_dir=tmp_path / "a", console=False)
    second = logging_utils.setup_logging(log_dir=tmp_path / "b", console=False)

    assert first == second
    assert not (tmp_path / "b").exists()


def test_log_dir_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUILLWORK_LOG_DIR", str(tmp_path / "env"))

    log_path = logging_utils.setup_logging(console=False)

    assert log_path.parent == tmp_path / "env"


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", logging.DEBUG), (" Warning ", logging.WARNING), (logging.ERROR, logging.ERROR), ("bogus", logging.INFO)],
)
def test_resolve_level(level, expected: int) -> None:
    assert logging_utils.resolve_level(level) == expected


def test_uuid_prefix_and_length() -> None:
    ids.set_id_length(8)

    value = ids.uuid("paragraph")

    assert value.startswith("paragraph-")
    assert len(value) == len("paragraph-") + 8
    assert len(ids.uuid()) == 8
    assert ids.uuid("x") != ids.uuid("x")


def test_id_length_is_clamped() -> None:
    ids.set_id_length(1)
    assert len(ids.uuid()) == 6

    ids.set_id_length(100)
    assert len(ids.uuid()) == 32


def test_configure_applies_settings(tmp_path: Path) -> None:
    settings = Settings(log_level="WARNING", id_length=10)

    result = quillwork.configure(settings, log_dir=tmp_path)

    assert result is settings
    assert logging.getLogger().level == logging.WARNING
    assert len(ids.uuid()) == 10
    assert logging_utils.get_log_path() == tmp_path / "quillwork.log"


def test_log_lines_name_the_document(tmp_path: Path) -> None:
    log_path = logging_utils.setup_logging("debug", log_dir=tmp_path, console=False)
    logger = logging_utils.get_logger("quillwork.test")

    logging_utils.document_logger(logger, "doc-42").info("edited")
    logger.info("no document here")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert any(line.endswith("| doc-42 | edited") for line in lines)
    assert any(line.endswith("| - | no document here") for line in lines)


def test_transaction_logs_carry_document_id(tmp_path: Path) -> None:
    log_path = logging_utils.setup_logging("debug", log_dir=tmp_path, console=False)
    doc = Document(document_id="doc-logged")

    with Transaction(doc):
        pass
    for handler in logging.getLogger().handlers:
        handler.flush()

    text = log_path.read_text(encoding="utf-8")
    assert "| doc-logged | Transaction" in text
