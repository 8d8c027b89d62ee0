"""Tests for the stdwebhooks CLI."""

import json
import time

from click.testing import CliRunner

from stdwebhooks.cli import cli
from stdwebhooks.signing import decode_secret
from stdwebhooks.verifier import HEADER_ID, HEADER_SIGNATURE, HEADER_TIMESTAMP, WebhookVerifier

from conftest import TEST_SECRET


def _invoke(*args: str):
    return CliRunner().invoke(cli, list(args), obj={})


def test_generate_secret():
    result = _invoke("generate-secret", "--bytes", "32")

    assert result.exit_code == 0
    assert len(decode_secret(result.output.strip())) == 32


def test_sign_prints_headers_as_json(payload):
    timestamp = int(time.time())

    result = _invoke(
        "--secret", TEST_SECRET,
        "sign", "--id", "msg_1", "--timestamp", str(timestamp), "--payload", payload, "--json",
    )

    assert result.exit_code == 0
    headers = json.loads(result.output)
    assert headers[HEADER_ID] == "msg_1"
    assert headers[HEADER_TIMESTAMP] == str(timestamp)
    assert headers[HEADER_SIGNATURE] == WebhookVerifier(TEST_SECRET).sign("msg_1", timestamp, payload)


def test_sign_from_payload_file(tmp_path, payload):
    body_path = tmp_path / "body.json"
    body_path.write_text(payload)

    result = _invoke(
        "--secret", "test_secret", "--raw",
        "sign", "--id", "msg_1", "--timestamp", "1614265330", "--payload-file", str(body_path), "--json",
    )

    assert result.exit_code == 0
    expected = WebhookVerifier.from_raw("test_secret").sign("msg_1", 1614265330, payload)
    assert json.loads(result.output)[HEADER_SIGNATURE] == expected


def test_verify_valid(payload):
    timestamp = int(time.time())
    signature = WebhookVerifier(TEST_SECRET).sign("msg_1", timestamp, payload)

    result = _invoke(
        "--secret", TEST_SECRET,
        "verify", "--id", "msg_1", "--timestamp", str(timestamp),
        "--signature", f"v2,bogus {signature}", "--payload", payload,
    )

    assert result.exit_code == 0
    assert "Signature is valid" in result.output
    assert '"event": "test_event"' in result.output


def test_verify_rejects_stale_delivery(payload):
    timestamp = int(time.time()) - 3600
    signature = WebhookVerifier(TEST_SECRET).sign("msg_1", timestamp, payload)

    result = _invoke(
        "--secret", TEST_SECRET,
        "verify", "--id", "msg_1", "--timestamp", str(timestamp),
        "--signature", signature, "--payload", payload,
    )

    assert result.exit_code == 1
    assert "message timestamp too old" in result.output


def test_verify_rejects_bad_signature(payload):
    result = _invoke(
        "--secret", TEST_SECRET,
        "verify", "--id", "msg_1", "--timestamp", str(int(time.time())),
        "--signature", "v1,invalid", "--payload", payload,
    )

    assert result.exit_code == 1
    assert "no matching signature found" in result.output


def test_missing_secret(payload):
    result = _invoke("sign", "--payload", payload)

    assert result.exit_code == 1
    assert "webhook secret not configured" in result.output


def test_missing_payload():
    result = _invoke("--secret", TEST_SECRET, "sign")

    assert result.exit_code == 1
    assert "--payload" in result.output
