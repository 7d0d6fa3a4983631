import logging

import pytest

from xraycore.ctxmissing import (
    ContextMissingError,
    ContextMissingStrategy,
    IgnoreErrorStrategy,
    LogErrorStrategy,
    RuntimeErrorStrategy,
)


def test_runtime_error_strategy_raises_with_value():
    strategy = RuntimeErrorStrategy()
    with pytest.raises(ContextMissingError) as info:
        strategy.context_missing("TestRuntimeError")
    assert info.value.value == "TestRuntimeError"
    assert str(info.value) == "TestRuntimeError"


def test_context_missing_error_is_runtime_error():
    with pytest.raises(RuntimeError, match="boom"):
        RuntimeErrorStrategy().context_missing("boom")


def test_log_error_strategy_logs(caplog):
    with caplog.at_level(logging.DEBUG, logger="xraycore"):
        LogErrorStrategy().context_missing("TestLogError")
    messages = [record.getMessage() for record in caplog.records]
    assert "Suppressing AWS X-Ray context missing panic: TestLogError" in messages
    assert caplog.records[-1].levelno == logging.ERROR


def test_ignore_error_strategy_does_nothing(caplog):
    with caplog.at_level(logging.DEBUG, logger="xraycore"):
        result = IgnoreErrorStrategy().context_missing("TestIgnoreError")
    assert result is None
    assert caplog.records == []


def test_base_strategy_is_abstract():
    with pytest.raises(TypeError):
        ContextMissingStrategy()