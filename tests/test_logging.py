import logging

import pytest

from photoviewer import logging as pv_logging


@pytest.fixture
def isolated_logging(monkeypatch):
    monkeypatch.setattr(pv_logging, "_log_path", None)
    monkeypatch.setattr(pv_logging, "_console_level", logging.WARNING)
    monkeypatch.setattr(pv_logging, "_area_loggers", {})
    yield
    for logger in pv_logging._area_loggers.values():
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


def make_record(level=logging.INFO, msg="hello"):
    return logging.LogRecord("photoviewer.vault", level, __file__, 1, msg, None, None)


def test_file_formatter_prefixes_area():
    line = pv_logging.AreaFormatter("vault").format(make_record())

    assert "[PHOTOVIEWER.vault] INFO: hello" in line


def test_console_formatter_colors_area_and_level():
    line = pv_logging.ColoredConsoleFormatter("session").format(make_record(logging.ERROR))

    assert "[PHOTOVIEWER.session]" in line
    assert pv_logging.AREA_COLORS["session"] in line
    assert pv_logging.LEVEL_COLORS[logging.ERROR] in line


def test_setup_logging_upgrades_existing_loggers(tmp_path, isolated_logging):
    logger = pv_logging.get_logger("testarea")
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)

    log_dir = pv_logging.setup_logging(str(tmp_path / "logs"), console_level=logging.DEBUG)
    logger.debug("after setup")

    assert log_dir == tmp_path / "logs"
    assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    assert "after setup" in (log_dir / "latest.log").read_text()
    assert pv_logging.get_logger("testarea") is logger
