"""Tests for curlgen.parser.options -- the curl flag grammar."""

from __future__ import annotations

import pytest

from curlgen.exceptions import MissingArgumentError, UnknownFlagError
from curlgen.models import (
    BasicAuth,
    BearerAuth,
    DataOrigin,
    HeaderSource,
    NoAuth,
    PartialRequest,
)
from curlgen.parser.options import known_flags, parse
from curlgen.parser.tokenizer import tokenize


def _parse(command: str) -> PartialRequest:
    return parse(tokenize(command))


# ---------------------------------------------------------------------------
# URL and method
# ---------------------------------------------------------------------------


class TestUrlAndMethod:
    def test_leading_curl_is_dropped(self) -> None:
        assert _parse("curl https://x.com").url == "https://x.com"
        assert _parse("https://x.com").url == "https://x.com"

    def test_url_flag(self) -> None:
        assert _parse("curl --url https://x.com").url == "https://x.com"

    def test_second_url_is_recorded(self) -> None:
        partial = _parse("curl https://a.com https://b.com")
        assert partial.url == "https://a.com"
        assert partial.extra_urls == ["https://b.com"]

    def test_no_defaults_applied(self) -> None:
        partial = _parse("curl https://x.com")
        assert partial.method is None
        assert partial.headers == []
        assert partial.auth == NoAuth()

    @pytest.mark.parametrize(
        "command",
        ["curl -X post x", "curl -XPOST x", "curl --request POST x", "curl -sXpost x"],
    )
    def test_request_spellings(self, command: str) -> None:
        assert _parse(command).method == "POST"

    def test_non_standard_method_is_kept_with_warning(self) -> None:
        partial = _parse("curl -X PURGE x")
        assert partial.method == "PURGE"
        assert any("PURGE" in w for w in partial.warnings)

    def test_head_flag(self) -> None:
        assert _parse("curl -I x").method == "HEAD"
        assert _parse("curl --head x").method == "HEAD"


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_header_split_at_first_colon(self) -> None:
        partial = _parse("curl -H 'X-Time: 10:30' x")
        assert partial.headers[0].name == "X-Time"
        assert partial.headers[0].value == "10:30"
        assert partial.headers[0].source == HeaderSource.HEADER

    def test_only_one_leading_space_is_trimmed(self) -> None:
        assert _parse("curl -H 'A:  two' x").headers[0].value == " two"
        assert _parse("curl -H 'A:none' x").headers[0].value == "none"

    def test_semicolon_means_empty_header(self) -> None:
        header = _parse("curl -H 'X-Empty;' x").headers[0]
        assert (header.name, header.value) == ("X-Empty", "")

    def test_header_without_colon_is_recorded_as_malformed(self) -> None:
        partial = _parse("curl -H 'NoColon' x")
        assert partial.headers == []
        assert partial.malformed_headers == ["NoColon"]

    def test_order_is_preserved(self) -> None:
        partial = _parse("curl -H 'B: 1' -H 'A: 2' -H 'C: 3' x")
        assert [h.name for h in partial.headers] == ["B", "A", "C"]

    def test_same_name_same_flag_family_last_wins(self) -> None:
        partial = _parse("curl -H 'Accept: a' -H 'accept: b' x")
        assert len(partial.headers) == 1
        assert partial.headers[0].value == "b"

    def test_same_name_different_family_both_kept(self) -> None:
        partial = _parse("curl -A agent/1 -H 'User-Agent: other' x")
        assert [(h.value, h.source) for h in partial.headers] == [
            ("agent/1", HeaderSource.USER_AGENT),
            ("other", HeaderSource.HEADER),
        ]

    def test_user_agent_and_referer(self) -> None:
        partial = _parse("curl -A 'Bot/2' -e 'https://ref.example;auto' x")
        assert [(h.name, h.value) for h in partial.headers] == [
            ("User-Agent", "Bot/2"),
            ("Referer", "https://ref.example"),
        ]

    def test_cookies_are_collected(self) -> None:
        partial = _parse("curl -b 'a=1' --cookie 'b=2' x")
        assert partial.cookies == ["a=1", "b=2"]


# ---------------------------------------------------------------------------
# Data and forms
# ---------------------------------------------------------------------------


class TestData:
    @pytest.mark.parametrize("flag", ["-d", "--data", "--data-raw", "--data-binary", "--data-ascii"])
    def test_data_spellings(self, flag: str) -> None:
        partial = _parse(f"curl {flag} 'a=1' x")
        assert [c.value for c in partial.data] == ["a=1"]
        assert partial.data[0].origin == DataOrigin.RAW

    def test_chunks_accumulate_in_order(self) -> None:
        partial = _parse("curl -d a=1 -d b=2 x")
        assert [c.value for c in partial.data] == ["a=1", "b=2"]

    def test_data_file_reference_warns(self) -> None:
        partial = _parse("curl -d @body.json x")
        assert partial.data[0].value == "@body.json"
        assert any("@body.json" in w for w in partial.warnings)

    def test_data_raw_does_not_warn_about_at(self) -> None:
        assert _parse("curl --data-raw @literal x").warnings == []

    def test_data_urlencode_name_value(self) -> None:
        chunk = _parse("curl --data-urlencode 'q=hello world&more' x").data[0]
        assert chunk.value == "q=hello%20world%26more"
        assert chunk.origin == DataOrigin.URLENCODE
        assert (chunk.name, chunk.decoded) == ("q", "hello world&more")

    def test_data_urlencode_content_only(self) -> None:
        chunk = _parse("curl --data-urlencode 'a b' x").data[0]
        assert chunk.value == "a%20b"
        assert chunk.name is None

    def test_data_urlencode_leading_equals(self) -> None:
        chunk = _parse("curl --data-urlencode '=a=b' x").data[0]
        assert chunk.value == "a%3Db"
        assert chunk.name is None

    def test_json_flag_adds_headers(self) -> None:
        partial = _parse("""curl --json '{"a": 1}' x""")
        assert partial.data[0].origin == DataOrigin.JSON
        assert [(h.name, h.value, h.source) for h in partial.headers] == [
            ("Content-Type", "application/json", HeaderSource.JSON),
            ("Accept", "application/json", HeaderSource.JSON),
        ]

    def test_form_parts(self) -> None:
        partial = _parse("curl -F 'a=1' --form 'f=@x.png' --form-string 'b=@c' x")
        assert [(p.spec, p.literal) for p in partial.form_parts] == [
            ("a=1", False),
            ("f=@x.png", False),
            ("b=@c", True),
        ]

    def test_get_flag(self) -> None:
        assert _parse("curl -G -d a=1 x").get is True
        assert _parse("curl --get x").get is True


# ---------------------------------------------------------------------------
# Auth and client options
# ---------------------------------------------------------------------------


class TestAuthAndOptions:
    def test_basic_auth(self) -> None:
        assert _parse("curl -u user:p:ss x").auth == BasicAuth(username="user", password="p:ss")

    def test_basic_auth_without_password(self) -> None:
        assert _parse("curl --user user x").auth == BasicAuth(username="user", password="")

    def test_bearer(self) -> None:
        assert _parse("curl --oauth2-bearer tok x").auth == BearerAuth(token="tok")

    def test_boolean_cluster(self) -> None:
        partial = _parse("curl -sSLk x")
        assert partial.follow_redirects is True
        assert partial.insecure is True

    def test_long_booleans(self) -> None:
        partial = _parse("curl --location --insecure x")
        assert partial.follow_redirects and partial.insecure

    @pytest.mark.parametrize("command", ["curl -m 2.5 x", "curl --max-time 2.5 x", "curl -m2.5 x"])
    def test_max_time(self, command: str) -> None:
        assert _parse(command).timeout_seconds == 2.5

    @pytest.mark.parametrize("value", ["abc", "-1", "inf", "nan"])
    def test_bad_max_time(self, value: str) -> None:
        with pytest.raises(MissingArgumentError) as exc_info:
            _parse(f"curl -m {value} x")
        assert exc_info.value.token == "-m"

    def test_ignored_flags(self) -> None:
        partial = _parse(
            "curl -s -S -v -i --compressed -o out.txt -w '%{http_code}' --silent x"
        )
        assert partial.url == "x"
        assert partial.data == []


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_unknown_long_flag(self) -> None:
        with pytest.raises(UnknownFlagError) as exc_info:
            _parse("curl --bogus https://x.com")
        assert exc_info.value.token == "--bogus"
        assert exc_info.value.message == "unknown option: --bogus"
        assert exc_info.value.kind == "UnknownFlagError"

    def test_unknown_short_flag(self) -> None:
        with pytest.raises(UnknownFlagError) as exc_info:
            _parse("curl -Z x")
        assert exc_info.value.token == "-Z"

    def test_unknown_letter_in_cluster_reports_whole_token(self) -> None:
        with pytest.raises(UnknownFlagError) as exc_info:
            _parse("curl -sZ x")
        assert exc_info.value.token == "-sZ"

    def test_lone_dash_is_unknown(self) -> None:
        with pytest.raises(UnknownFlagError):
            _parse("curl - x")

    @pytest.mark.parametrize(
        ("command", "flag"),
        [("curl x -H", "-H"), ("curl x --data", "--data"), ("curl x -sX", "-X")],
    )
    def test_missing_value(self, command: str, flag: str) -> None:
        with pytest.raises(MissingArgumentError) as exc_info:
            _parse(command)
        assert exc_info.value.token == flag
        assert exc_info.value.kind == "MissingArgumentError"


def test_known_flags_lists_both_spellings() -> None:
    flags = known_flags()
    assert "-H" in flags
    assert "--header" in flags
    assert "--data-urlencode" in flags
