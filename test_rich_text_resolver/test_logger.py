import logging

from rich_text_resolver.logger import DEFAULT_LOG_LEVEL, DETAIL, get_logger, trace_logger


def test_logger_defaults_to_warning(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "")
    logger = get_logger()
    assert logger.level == getattr(logging, DEFAULT_LOG_LEVEL)


def test_logger_reads_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "info")
    logger = get_logger()
    assert logger.level == 20


def test_logger_adds_only_one_handler(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "")
    get_logger()
    logger = get_logger()
    assert len(logger.handlers) == 1


def test_trace_logger_emits_detail_records(caplog):
    with caplog.at_level(DETAIL, logger=trace_logger.name):
        trace_logger.detail("visiting %s", "p")  # type: ignore

    assert caplog.records[-1].levelname == "DETAIL"
    assert caplog.records[-1].getMessage() == "visiting p"
