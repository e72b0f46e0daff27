"""Integration tests — publisher signs, host loads and verifies.

Runs the whole path a host takes: settings from the environment, a plugin
module on disk with real function hooks, the runtime capability probe,
and the CLI on top.
"""

from __future__ import annotations

import json
import textwrap

import pytest
from typer.testing import CliRunner

from pluginseal.cli.app import app
from pluginseal.core.capabilities import default_capabilities
from pluginseal.core.errors import SignatureMismatchError, UnsignedPluginError
from pluginseal.core.hasher import compute_plugin_hash
from pluginseal.models.verification import SignatureAlgorithm
from pluginseal.plugins.loader import load_plugin_descriptor
from pluginseal.plugins.verifier import build_verifier

PLUGIN_SOURCE = textwrap.dedent(
    """\
    name = "com.acme.reports"
    version = "3.2.0"


    def init(ctx):
        ctx.register("reports")


    def start(ctx):
        ctx.schedule("nightly")
    """
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for var in (
        "ENVIRONMENT", "LOG_LEVEL", "DEBUG", "ALGORITHM",
        "STRICT_MODE", "ALLOW_SELF_SIGNED", "TRUSTED_PUBLIC_KEYS",
    ):
        monkeypatch.delenv(f"PLUGINSEAL_{var}", raising=False)
    monkeypatch.chdir(tmp_path)


def _publish(tmp_path, private_key, algorithm, sign, filename="reports.py", source=PLUGIN_SOURCE):
    """Write the plugin, fingerprint it as the host will, and append a signature."""
    path = tmp_path / filename
    path.write_text(source, encoding="utf-8")
    digest = compute_plugin_hash(load_plugin_descriptor(path), default_capabilities())
    signature = sign(private_key, digest, algorithm)
    path.write_text(source + f"\nsignature = {signature!r}\n", encoding="utf-8")
    return path


@pytest.mark.parametrize("algorithm", list(SignatureAlgorithm))
class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_production_host_accepts_signed_plugin(
        self, monkeypatch, tmp_path, algorithm, keys_by_algorithm, sign, pem,
    ):
        key = keys_by_algorithm[algorithm]
        path = _publish(tmp_path, key, algorithm, sign)
        monkeypatch.setenv("PLUGINSEAL_ENVIRONMENT", "production")
        monkeypatch.setenv("PLUGINSEAL_ALGORITHM", algorithm.value)
        monkeypatch.setenv("PLUGINSEAL_TRUSTED_PUBLIC_KEYS", json.dumps({"com.acme": pem(key)}))

        verifier = build_verifier()
        result = await verifier.verify_plugin_signature(load_plugin_descriptor(path))
        assert result.verified is True
        assert result.publisher_id == "com.acme"
        assert result.algorithm == algorithm.value

    @pytest.mark.asyncio
    async def test_edited_hook_is_rejected(
        self, monkeypatch, tmp_path, algorithm, keys_by_algorithm, sign, pem,
    ):
        key = keys_by_algorithm[algorithm]
        path = _publish(tmp_path, key, algorithm, sign)
        edited = path.read_text(encoding="utf-8").replace('"nightly"', '"hourly-ish"')
        path.write_text(edited, encoding="utf-8")
        monkeypatch.setenv("PLUGINSEAL_ALGORITHM", algorithm.value)
        monkeypatch.setenv("PLUGINSEAL_STRICT_MODE", "false")
        monkeypatch.setenv("PLUGINSEAL_TRUSTED_PUBLIC_KEYS", json.dumps({"com.acme": pem(key)}))

        verifier = build_verifier()
        with pytest.raises(SignatureMismatchError):
            await verifier.verify_plugin_signature(load_plugin_descriptor(path))

    def test_cli_verifies_published_plugin(
        self, monkeypatch, tmp_path, algorithm, keys_by_algorithm, sign, pem,
    ):
        key = keys_by_algorithm[algorithm]
        path = _publish(tmp_path, key, algorithm, sign)
        monkeypatch.setenv("PLUGINSEAL_TRUSTED_PUBLIC_KEYS", json.dumps({"com.acme": pem(key)}))

        result = runner.invoke(app, ["verify", str(path), "-a", algorithm.value])
        assert result.exit_code == 0, result.output
        assert "VERIFIED" in result.output


@pytest.mark.asyncio
async def test_strict_host_refuses_unsigned_plugin(monkeypatch, tmp_path, rsa_private_key, pem):
    path = tmp_path / "reports.py"
    path.write_text(PLUGIN_SOURCE, encoding="utf-8")
    monkeypatch.setenv(
        "PLUGINSEAL_TRUSTED_PUBLIC_KEYS", json.dumps({"com.acme": pem(rsa_private_key)})
    )
    verifier = build_verifier()
    with pytest.raises(UnsignedPluginError):
        await verifier.verify_plugin_signature(load_plugin_descriptor(path))


def test_cli_fingerprint_matches_publisher_digest(tmp_path):
    path = tmp_path / "reports.py"
    path.write_text(PLUGIN_SOURCE, encoding="utf-8")
    digest = compute_plugin_hash(load_plugin_descriptor(path), default_capabilities())

    result = runner.invoke(app, ["fingerprint", str(path)])
    assert result.exit_code == 0
    assert digest in result.output
