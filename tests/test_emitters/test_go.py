"""Tests for the Go net/http emitter."""

from __future__ import annotations

import pytest

from curlgen.converter import build_request
from curlgen.emitters.go import GoEmitter, go_string
from curlgen.models import ConvertOptions


def _go(command: str, **options) -> str:
    return GoEmitter().emit(build_request(command), ConvertOptions(**options))


def test_simple_get() -> None:
    code = _go("curl https://api.github.com/zen")
    assert code.startswith(
        "package main\n"
        "\n"
        "import (\n"
        '\t"fmt"\n'
        '\t"io"\n'
        '\t"net/http"\n'
        ")\n"
        "\n"
        "func main() {\n"
        '\treq, err := http.NewRequest(http.MethodGet, "https://api.github.com/zen", nil)\n'
    )
    assert (
        "\tclient := &http.Client{\n"
        "\t\tCheckRedirect: func(req *http.Request, via []*http.Request) error {\n"
        "\t\t\treturn http.ErrUseLastResponse\n"
        "\t\t},\n"
        "\t}\n"
    ) in code
    assert code.endswith("\tfmt.Println(string(respBody))\n}\n")


def test_json_body_uses_raw_string() -> None:
    code = _go("""curl -X PATCH -d '{"a": "b"}' https://x.com""")
    assert '"strings"' in code
    assert 'http.NewRequest(http.MethodPatch, "https://x.com", strings.NewReader(`{"a": "b"}`))' in code
    assert '\treq.Header.Add("Content-Type", "application/json")\n' in code


def test_basic_auth_and_host_header() -> None:
    code = _go("curl -u user:pass -H 'Host: example.org' https://x.com")
    assert '\treq.SetBasicAuth("user", "pass")\n' in code
    assert '\treq.Host = "example.org"\n' in code
    assert 'Header.Add("Host"' not in code


def test_bearer_auth() -> None:
    code = _go("curl --oauth2-bearer tok https://x.com")
    assert '\treq.Header.Add("Authorization", "Bearer tok")\n' in code


def test_form_body() -> None:
    code = _go("curl --data-urlencode 'q=a b' https://x.com")
    assert '"net/url"' in code
    assert "\tform := url.Values{}\n" in code
    assert '\tform.Add("q", "a b")\n' in code
    assert "strings.NewReader(form.Encode())" in code


def test_multipart() -> None:
    code = _go("curl -F 'file=@doc.pdf' -F 'meta=@m.json;type=application/json' -F 'title=Hi' https://x.com")
    for name in ('"bytes"', '"mime/multipart"', '"os"', '"net/textproto"'):
        assert name in code
    assert '\tfile1, err := os.Open("doc.pdf")\n' in code
    assert '\tpart1, err := writer.CreateFormFile("file", "doc.pdf")\n' in code
    assert '\tfile2, err := os.Open("m.json")\n' in code
    assert '\theader2.Set("Content-Type", "application/json")\n' in code
    assert "\tpart2, err := writer.CreatePart(header2)\n" in code
    assert '\twriter.WriteField("title", "Hi")\n' in code
    assert "\twriter.Close()\n" in code
    assert '\treq.Header.Set("Content-Type", writer.FormDataContentType())\n' in code
    assert "http.NewRequest(http.MethodPost, \"https://x.com\", body)" in code


def test_explicit_multipart_content_type_is_dropped() -> None:
    code = _go("curl -H 'Content-Type: multipart/form-data' -F 'a=b' https://x.com")
    assert 'Header.Add("Content-Type"' not in code


def test_client_options() -> None:
    code = _go("curl -k -m 2.5 https://x.com")
    assert '"crypto/tls"' in code
    assert '"time"' in code
    assert "\t\tTimeout: 2500 * time.Millisecond,\n" in code
    assert "\t\t\tTLSClientConfig: &tls.Config{InsecureSkipVerify: true},\n" in code
    assert "\tclient := &http.Client{\n" in code


def test_whole_second_timeout() -> None:
    assert "Timeout: 30 * time.Second," in _go("curl -m 30 https://x.com")


def test_location_keeps_default_redirect_policy() -> None:
    code = _go("curl -L https://x.com")
    assert "\tclient := &http.Client{}\n" in code
    assert "CheckRedirect" not in code


def test_zero_max_time_sets_no_timeout() -> None:
    code = _go("curl -L -m 0 https://x.com")
    assert "Timeout" not in code
    assert '"time"' not in code


def test_without_imports() -> None:
    code = _go("curl https://x.com", include_imports=False)
    assert code.startswith("func main() {\n")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("plain", '"plain"'),
        ('{"a": 1}', '`{"a": 1}`'),
        ("two\nlines", "`two\nlines`"),
        ("has `tick`\n", '"has `tick`\\n"'),
        ("crlf\r\n", '"crlf\\r\\n"'),
    ],
)
def test_go_string(text: str, expected: str) -> None:
    assert go_string(text) == expected
