import logging
import sys

import pytest
import respx
from httpx import Response
from openproject_client.auth import CookieSessionAuth
from openproject_client.logging import (
    LogfmtFormatter,
    event_fields,
    redact_url,
    setup_logging,
)


def _record(msg, name="openproject_client.client", **extra):
    record = logging.LogRecord(name, logging.DEBUG, __file__, 1, msg, None, None)
    for key, val in extra.items():
        setattr(record, key, val)
    return record


def test_request_event_renders_known_fields_only():
    fields = event_fields(
        "get",
        "https://op.example.com/api/v3/projects?pageSize=5",
        status=200,
        duration_ms=12,
        resource="project",
    )
    line = LogfmtFormatter().format(_record("op.request", api_key="k", **fields))

    assert line == (
        "level=debug logger=openproject_client.client event=op.request method=GET "
        'url="https://op.example.com/api/v3/projects?pageSize=5" status=200 '
        "duration_ms=12 resource=project"
    )


def test_missing_extras_are_skipped_and_quotes_escaped():
    line = LogfmtFormatter().format(_record('login "failed"\ntwice'))

    assert line == (
        "level=debug logger=openproject_client.client "
        'event="login \\"failed\\"\\ntwice"'
    )


def test_exception_type_is_rendered():
    try:
        raise TimeoutError("slow")
    except TimeoutError:
        record = _record("op.request", status="exception")
        record.exc_info = sys.exc_info()

    line = LogfmtFormatter().format(record)
    assert line.endswith("status=exception error=TimeoutError")


@pytest.mark.parametrize(
    "url",
    [
        "https://op.example.com/api/v3/projects?jwt=header.claims.sig",
        "https://op.example.com/api/v3/projects?offset=1&api_key=sekrit",
    ],
)
def test_redact_url_hides_credentials(url):
    redacted = redact_url(url)

    assert "header.claims.sig" not in redacted
    assert "sekrit" not in redacted
    assert "redacted" in redacted
    assert redacted.startswith("https://op.example.com/api/v3/projects?")


def test_redact_url_leaves_plain_urls_alone():
    url = "https://op.example.com/api/v3/work_packages?offset=2&pageSize=5"
    assert redact_url(url) == url


@respx.mock
def test_login_event_is_logged_with_redacted_url(caplog):
    caplog.set_level(logging.INFO, logger="openproject_client.auth")
    auth_url = "https://op.example.com/login?token=one-time"
    respx.post(auth_url).mock(
        return_value=Response(200, headers=[("Set-Cookie", "sid=abc")], json={})
    )

    CookieSessionAuth("ada", "hunter2", auth_url).ensure_session()

    record = next(r for r in caplog.records if r.getMessage() == "op.login")
    assert record.method == "POST"
    assert record.status == 200
    assert "one-time" not in record.url
    line = LogfmtFormatter().format(record)
    assert line.startswith("level=info logger=openproject_client.auth event=op.login")
    assert "hunter2" not in line


def test_setup_logging_replaces_its_own_handler():
    log = setup_logging("debug", logger_name="openproject_client.test")
    other = logging.NullHandler()
    log.addHandler(other)

    setup_logging("warning", logger_name="openproject_client.test")

    formatters = [h.formatter for h in log.handlers if h is not other]
    assert len(formatters) == 1
    assert isinstance(formatters[0], LogfmtFormatter)
    assert other in log.handlers
    assert log.level == logging.WARNING
    log.removeHandler(other)
