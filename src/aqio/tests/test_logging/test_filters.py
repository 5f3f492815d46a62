import logging

from aqio.core.logging.filters import RedactFilter, RequestIdFilter, reset_request_id, set_request_id


def make_record():
    # name, level, pathname, lineno, msg, args, exc_info
    return logging.LogRecord("test", logging.INFO, __file__, 1, "hello %s", ("world",), None)


def test_request_id_filter_defaults_to_dash():
    rec = make_record()
    token = set_request_id(None)
    try:
        assert RequestIdFilter().filter(rec) is True
    finally:
        reset_request_id(token)
    assert rec.request_id == "-"  # fallback sentinel


def test_request_id_filter_uses_contextvar():
    rec = make_record()
    token = set_request_id("abc-123")
    try:
        RequestIdFilter().filter(rec)
    finally:
        reset_request_id(token)
    assert rec.request_id == "abc-123"


def test_request_id_filter_respects_record_extra():
    rec = make_record()
    rec.request_id = "explicit"
    token = set_request_id("context-id")
    try:
        RequestIdFilter().filter(rec)
    finally:
        reset_request_id(token)
    # extra={"request_id": ...} wins
    assert rec.request_id == "explicit"


def test_redact_filter_masks_sensitive_extras():
    rec = make_record()
    rec.invitation_token = "0f3c9a"
    rec.Password = "hunter2"
    rec.event_id = "e-1"
    assert RedactFilter().filter(rec) is True
    assert rec.invitation_token == RedactFilter.REDACTED
    assert rec.Password == RedactFilter.REDACTED
    assert rec.event_id == "e-1"
