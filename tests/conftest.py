"""Shared test fixtures for pluginseal."""

from __future__ import annotations

import base64
from collections.abc import Callable
from typing import Any

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from pluginseal.core.capabilities import BackendKind, StaticCapabilities
from pluginseal.core.hasher import compute_plugin_hash
from pluginseal.models.plugin import PluginDescriptor
from pluginseal.models.verification import SignatureAlgorithm, VerifierConfig
from pluginseal.plugins.verifier import PluginSignatureVerifier

PUBLISHER = "com.acme"
PLUGIN_NAME = "com.acme.widget"

INIT_SRC = "def init(ctx):\n    ctx.register('widget')\n"
START_SRC = "def start(ctx):\n    ctx.emit('started')\n"
DESTROY_SRC = "def destroy(ctx):\n    ctx.emit('stopped')\n"


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------


def public_pem(private_key: Any) -> str:
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


def sign_data(private_key: Any, data: str, algorithm: SignatureAlgorithm) -> str:
    """Sign *data* the way a publisher would; ES256 signatures are DER."""
    payload = data.encode("utf-8")
    if SignatureAlgorithm(algorithm) is SignatureAlgorithm.RS256:
        raw = private_key.sign(payload, padding.PKCS1v15(), hashes.SHA256())
    else:
        raw = private_key.sign(payload, ec.ECDSA(hashes.SHA256()))
    return base64.b64encode(raw).decode("ascii")


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def other_ec_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def keys_by_algorithm(
    rsa_private_key: rsa.RSAPrivateKey,
    ec_private_key: ec.EllipticCurvePrivateKey,
) -> dict[SignatureAlgorithm, Any]:
    return {
        SignatureAlgorithm.RS256: rsa_private_key,
        SignatureAlgorithm.ES256: ec_private_key,
    }


# ---------------------------------------------------------------------------
# Capability probes
# ---------------------------------------------------------------------------


@pytest.fixture
def server_only() -> StaticCapabilities:
    return StaticCapabilities(backends=(BackendKind.SERVER,))


@pytest.fixture
def sandbox_only() -> StaticCapabilities:
    return StaticCapabilities(backends=(BackendKind.SANDBOX,))


@pytest.fixture
def no_crypto() -> StaticCapabilities:
    return StaticCapabilities(backends=())


# ---------------------------------------------------------------------------
# Plugin factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_plugin() -> Callable[..., PluginDescriptor]:
    """Factory fixture: build a PluginDescriptor with sensible defaults."""

    def _factory(**overrides: Any) -> PluginDescriptor:
        defaults: dict[str, Any] = {
            "name": PLUGIN_NAME,
            "version": "1.0.0",
            "init": INIT_SRC,
            "start": START_SRC,
            "destroy": DESTROY_SRC,
        }
        defaults.update(overrides)
        return PluginDescriptor(**defaults)

    return _factory


@pytest.fixture
def make_signed_plugin(
    make_plugin: Callable[..., PluginDescriptor],
) -> Callable[..., PluginDescriptor]:
    """Factory fixture: build a plugin signed over its SHA-256 fingerprint."""

    def _factory(
        private_key: Any,
        algorithm: SignatureAlgorithm,
        **overrides: Any,
    ) -> PluginDescriptor:
        unsigned = make_plugin(**overrides)
        digest = compute_plugin_hash(unsigned, StaticCapabilities(strong_hash=True))
        return unsigned.model_copy(
            update={"signature": sign_data(private_key, digest, algorithm)}
        )

    return _factory


@pytest.fixture
def make_verifier() -> Callable[..., PluginSignatureVerifier]:
    """Factory fixture: build a verifier, trusting keys given as private keys."""

    def _factory(
        algorithm: SignatureAlgorithm = SignatureAlgorithm.RS256,
        *,
        strict_mode: bool = False,
        allow_self_signed: bool = False,
        trusted: dict[str, Any] | None = None,
        capabilities: StaticCapabilities | None = None,
    ) -> PluginSignatureVerifier:
        config = VerifierConfig(
            trusted_public_keys={
                pid: public_pem(key) for pid, key in (trusted or {}).items()
            },
            algorithm=algorithm,
            strict_mode=strict_mode,
            allow_self_signed=allow_self_signed,
        )
        return PluginSignatureVerifier(
            config, capabilities=capabilities or StaticCapabilities()
        )

    return _factory


@pytest.fixture
def sign() -> Callable[[Any, str, SignatureAlgorithm], str]:
    """The publisher-side signing helper, as a fixture."""
    return sign_data


@pytest.fixture
def pem() -> Callable[[Any], str]:
    """Return the SPKI PEM of a private key's public half."""
    return public_pem
