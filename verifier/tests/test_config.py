import pytest
from pydantic import ValidationError

from verifier.app.config import VerifierConfig


def test_defaults_match_storage_conventions():
    config = VerifierConfig()

    assert config.COMPRESSION_SUFFIX == ".br"
    assert config.DOCUMENT_SEPARATOR == "---\n"
    assert config.CHECK_EXTRA_OBJECTS is False
    assert config.FETCH_TIMEOUT_SECONDS is None
    assert config.max_decompressed_bytes == 64 * 1024 * 1024


def test_from_env_reads_prefixed_variables(monkeypatch):
    monkeypatch.setenv("VERIFIER_CHECK_EXTRA_OBJECTS", "yes")
    monkeypatch.setenv("VERIFIER_STRICT_IDENTITY_COLLISIONS", "1")
    monkeypatch.setenv("VERIFIER_COMPRESSION_SUFFIX", ".brotli")
    monkeypatch.setenv("VERIFIER_MAX_DECOMPRESSED_SIZE_MB", "8")
    monkeypatch.setenv("VERIFIER_FETCH_TIMEOUT_SECONDS", "2.5")

    config = VerifierConfig.from_env()

    assert config.CHECK_EXTRA_OBJECTS is True
    assert config.STRICT_IDENTITY_COLLISIONS is True
    assert config.COMPRESSION_SUFFIX == ".brotli"
    assert config.MAX_DECOMPRESSED_SIZE_MB == 8
    assert config.FETCH_TIMEOUT_SECONDS == 2.5


def test_from_env_without_variables_uses_defaults(monkeypatch):
    for name in (
        "VERIFIER_CHECK_EXTRA_OBJECTS",
        "VERIFIER_FETCH_TIMEOUT_SECONDS",
        "VERIFIER_COMPRESSION_SUFFIX",
    ):
        monkeypatch.delenv(name, raising=False)

    assert VerifierConfig.from_env().FETCH_TIMEOUT_SECONDS is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"COMPRESSION_SUFFIX": "br"},
        {"COMPRESSION_SUFFIX": ""},
        {"DOCUMENT_SEPARATOR": ""},
        {"MAX_DECOMPRESSED_SIZE_MB": 0},
        {"FETCH_TIMEOUT_SECONDS": -1},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        VerifierConfig(**overrides)


def test_config_is_immutable():
    config = VerifierConfig()

    with pytest.raises(ValidationError):
        config.CHECK_EXTRA_OBJECTS = True
