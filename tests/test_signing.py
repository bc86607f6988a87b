"""SigV4 signing tests."""

from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timedelta, timezone

from moodshift.tts.signing import (
    amz_date,
    canonical_request,
    date_stamp,
    sign_request,
    signing_key,
    string_to_sign,
)

URL = "https://polly.us-east-1.amazonaws.com/v1/speech"
NOW = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
BODY = b'{"Text":"<speak>hi</speak>"}'


def test_amz_date_format_drops_separators_and_fraction():
    assert amz_date(NOW) == "20240102T030405Z"
    assert date_stamp(NOW) == "20240102"


def test_amz_date_converts_to_utc():
    local = NOW.astimezone(timezone(timedelta(hours=5)))
    assert amz_date(local) == "20240102T030405Z"


def test_signing_key_matches_aws_documented_example():
    key = signing_key(
        "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY", "20120215", "us-east-1", "iam"
    )
    assert key.hex() == "f4780e2d9f65fa895f9c67b32ce1baf0b0d8a43505a000a1a9e090d414db404d"


def test_canonical_request_layout():
    canonical = canonical_request(
        "POST", "/v1/speech", "polly.us-east-1.amazonaws.com", "20240102T030405Z", "abc"
    )
    assert canonical == (
        "POST\n/v1/speech\n\n"
        "content-type:application/json\n"
        "host:polly.us-east-1.amazonaws.com\n"
        "x-amz-date:20240102T030405Z\n"
        "\n"
        "content-type;host;x-amz-date\n"
        "abc"
    )


def test_headers_and_signature():
    headers = sign_request("POST", URL, BODY, NOW, "us-east-1", "AKID", "SECRET")

    assert headers["Content-Type"] == "application/json"
    assert headers["Host"] == "polly.us-east-1.amazonaws.com"
    assert headers["X-Amz-Date"] == "20240102T030405Z"

    scope = "20240102/us-east-1/polly/aws4_request"
    canonical = canonical_request(
        "POST",
        "/v1/speech",
        "polly.us-east-1.amazonaws.com",
        "20240102T030405Z",
        hashlib.sha256(BODY).hexdigest(),
    )
    expected_sig = hmac.new(
        signing_key("SECRET", "20240102", "us-east-1", "polly"),
        string_to_sign("20240102T030405Z", scope, canonical).encode(),
        hashlib.sha256,
    ).hexdigest()

    assert headers["Authorization"] == (
        f"AWS4-HMAC-SHA256 Credential=AKID/{scope}, "
        f"SignedHeaders=content-type;host;x-amz-date, Signature={expected_sig}"
    )
    assert "\n" not in headers["Authorization"]


def test_string_to_sign_layout():
    out = string_to_sign("20240102T030405Z", "20240102/r/polly/aws4_request", "canon")
    lines = out.split("\n")
    assert lines[0] == "AWS4-HMAC-SHA256"
    assert lines[1] == "20240102T030405Z"
    assert lines[2] == "20240102/r/polly/aws4_request"
    assert lines[3] == hashlib.sha256(b"canon").hexdigest()


def test_signature_is_deterministic_and_time_dependent():
    a = sign_request("POST", URL, BODY, NOW, "us-east-1", "AKID", "SECRET")
    b = sign_request("POST", URL, BODY, NOW, "us-east-1", "AKID", "SECRET")
    c = sign_request(
        "POST", URL, BODY, NOW + timedelta(seconds=1), "us-east-1", "AKID", "SECRET"
    )
    assert a == b
    assert a["Authorization"] != c["Authorization"]


def test_signature_depends_on_body():
    a = sign_request("POST", URL, BODY, NOW, "us-east-1", "AKID", "SECRET")
    b = sign_request("POST", URL, BODY + b" ", NOW, "us-east-1", "AKID", "SECRET")
    assert a["Authorization"] != b["Authorization"]
