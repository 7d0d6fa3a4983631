import logging

from xraycore import logger


def test_filters_by_level(caplog):
    caplog.set_level(logging.WARNING, logger="xraycore")

    logger.debug("debug")
    logger.info("info")
    logger.warning("warn")
    logger.error("error")

    records = [r for r in caplog.records if r.name == "xraycore"]
    assert [r.levelno for r in records] == [logging.WARNING, logging.ERROR]
    assert [r.getMessage() for r in records] == ["warn", "error"]


def test_format_arguments(caplog):
    caplog.set_level(logging.INFO, logger="xraycore")
    logger.info("using %s on port %d", "daemon", 2000)
    messages = [r.getMessage() for r in caplog.records if r.name == "xraycore"]
    assert messages == ["using daemon on port 2000"]


def test_deferred_debug(caplog):
    caplog.set_level(logging.INFO, logger="xraycore")
    calls = []

    def produce():
        calls.append(True)
        return "deferred"

    logger.debug_deferred(produce)
    assert calls == []
    assert [r for r in caplog.records if r.name == "xraycore"] == []

    caplog.set_level(logging.DEBUG, logger="xraycore")
    logger.debug_deferred(produce)

    messages = [r.getMessage() for r in caplog.records if r.name == "xraycore"]
    assert messages == ["deferred"]
    assert calls