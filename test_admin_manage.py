import json

import pytest

import admin_manage
from admin_manage import EXIT_FAILURE, EXIT_OK, EXIT_VALIDATION, main
from error_handler import ConfigurationError, RequestValidationError


def test_rules_filtered(capsys):
    assert main(["rules", "--locale", "ja-JP", "--platform", "tiktok"]) == EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["country"]["authority"] == "Japanese Consumer Law & JARO"
    assert [r["id"] for r in payload["platform"]] == ["tiktok-1", "tiktok-2", "tiktok-3"]
    assert "finance" in payload["industry"]


def test_rules_unknown_locale(capsys):
    assert main(["rules", "--locale", "xx-XX"]) == EXIT_OK
    assert json.loads(capsys.readouterr().out)["country"] is None


def test_quick(capsys):
    assert main(["quick", "Click here for instant results"]) == EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["safe"] is False
    assert payload["confidence"] == 60


def test_check_requires_context():
    with pytest.raises(SystemExit):
        main(["check", "Hello"])


@pytest.mark.parametrize(
    "error,code",
    [
        (RequestValidationError(["Ad copy is required"], "compliance check request"), EXIT_VALIDATION),
        (ConfigurationError("GOOGLE_API_KEY is not configured"), EXIT_FAILURE),
    ],
)
def test_check_exit_codes(monkeypatch, capsys, error, code):
    async def failing_check(request):
        raise error

    monkeypatch.setattr(admin_manage, "_run_check", failing_check)
    assert main(["check", " ", "--locale", "en-US", "--platform", "google", "--industry", "general"]) == code
    assert str(error) in capsys.readouterr().err
