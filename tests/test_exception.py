import string

import pytest

from xraycore.exception import (
    DefaultFormattingStrategy,
    ExceptionRecord,
    MultiError,
    StackFrame,
    XRayError,
    convert_stack,
    new_exception_id,
)


def _raiser():
    raise RuntimeError("Test")


def test_multi_error_string_format():
    err = MultiError([ValueError("error one"), ValueError("error two")])
    assert str(err) == "2 errors occurred:\n* error one\n* error two\n"
    assert len(err) == 2


@pytest.mark.parametrize("count", [-1, 33])
def test_invalid_frame_count(count):
    with pytest.raises(ValueError, match="frameCount must be a non-negative integer"):
        DefaultFormattingStrategy(count)


def test_valid_frame_count():
    assert DefaultFormattingStrategy(10).frame_count == 10
    assert DefaultFormattingStrategy().frame_count == 32


def test_error():
    err = DefaultFormattingStrategy().error("Test")
    stack = convert_stack(err.stack_trace())
    assert str(err) == "Test"
    assert err.type == "error"
    assert stack[0].label == "test_error"


def test_errorf():
    err = DefaultFormattingStrategy().errorf("Test %d", 5)
    stack = convert_stack(err.stack_trace())
    assert str(err) == "Test 5"
    assert err.type == "error"
    assert stack[0].label == "test_errorf"


def test_errorf_without_args_keeps_text():
    err = DefaultFormattingStrategy().errorf("100%")
    assert err.message == "100%"


def test_panic():
    strategy = DefaultFormattingStrategy()
    try:
        _raiser()
    except RuntimeError as exc:
        err = strategy.panic(str(exc))
    stack = convert_stack(err.stack_trace())
    assert str(err) == "Test"
    assert err.type == "panic"
    assert stack[0].label == "_raiser"
    assert stack[1].label == "test_panic"


def test_panicf():
    strategy = DefaultFormattingStrategy()
    try:
        _raiser()
    except RuntimeError as exc:
        err = strategy.panicf("%s", exc)
    stack = convert_stack(err.stack_trace())
    assert str(err) == "Test"
    assert err.type == "panic"
    assert stack[0].label == "_raiser"
    assert stack[1].label == "test_panicf"


def test_frame_count_limits_stack():
    err = DefaultFormattingStrategy(1).error("Test")
    assert len(err.stack) == 1
    assert DefaultFormattingStrategy(0).error("Test").stack == []


def test_exception_from_error():
    record = DefaultFormattingStrategy(0).exception_from_error(ValueError("new error"))
    assert record.message == "new error"
    assert record.type == "ValueError"
    assert len(record.id) == 16
    assert record.remote is False


def test_exception_from_xray_error_uses_its_type_and_stack():
    strategy = DefaultFormattingStrategy()
    err = strategy.error("boom")
    record = strategy.exception_from_error(err)
    assert record.type == "error"
    assert record.message == "boom"
    assert record.stack[0].label == "test_exception_from_xray_error_uses_its_type_and_stack"


def test_exception_from_raised_error_uses_traceback():
    strategy = DefaultFormattingStrategy()
    try:
        _raiser()
    except RuntimeError as exc:
        record = strategy.exception_from_error(exc)
    assert record.type == "RuntimeError"
    assert record.stack[0].label == "_raiser"
    assert record.stack[0].path.endswith("test_exception.py")
    assert record.stack[0].line > 0


def test_exception_from_error_custom_type_and_remote():
    class ServiceFailure(Exception):
        request_id = "req-1"

    record = DefaultFormattingStrategy().exception_from_error(ServiceFailure("down"))
    assert record.type.endswith(".ServiceFailure")
    assert record.remote is True


def test_record_to_dict_omits_empty_fields():
    record = ExceptionRecord(id="abc", message="m", stack=[StackFrame(path="p", line=3)])
    assert record.to_dict() == {
        "id": "abc",
        "message": "m",
        "stack": [{"path": "p", "line": 3}],
    }


def test_xray_error_str_is_message():
    err = XRayError("panic", "msg")
    assert str(err) == "msg"
    assert err.stack_trace() == []


def test_new_exception_id_is_random_hex():
    first = new_exception_id()
    second = new_exception_id()
    assert len(first) == 16
    assert set(first) <= set(string.hexdigits.lower())
    assert first != second or len(second) == 16 and first == second is False