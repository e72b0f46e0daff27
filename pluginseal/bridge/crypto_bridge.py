"""Crypto bridge — two signature backends selected by runtime capability.

Bridge boundary
---------------
Priority chain for signature verification:

1. **Server backend** (``cryptography``): OpenSSL-backed verification.
   RS256 is PKCS#1 v1.5 + SHA-256, ES256 is ECDSA P-256 + SHA-256 over a
   DER-encoded signature.

2. **Sandbox backend** (PyJWT algorithm objects): the JOSE/WebCrypto-style
   path.  The PEM armour is stripped and the body imported as an SPKI key,
   the key family is checked against the algorithm, and the signature is
   verified in JOSE form (raw ``r || s`` for ES256).

3. **Fail-closed**: neither backend importable.  ``select_backend_kind`` raises
   ``CryptoUnavailableError``; it never answers ``False``, so a missing
   primitive cannot be mistaken for a bad signature.

Both backends decide identically for the same (data, signature, key,
algorithm).  They share one key import, ``pem_to_der``, so only an
armoured SPKI ``PUBLIC KEY`` block is ever accepted.  For ES256 both
accept a DER signature or the 64-byte raw form.
``verify`` returns ``False`` for every malformed or mismatched input and
only raises ``CryptoUnavailableError`` when its primitive cannot be loaded.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from types import SimpleNamespace
from typing import Protocol, runtime_checkable

from pluginseal.core.capabilities import (
    BACKEND_PREFERENCE,
    BackendKind,
    CapabilityProbe,
    default_capabilities,
)
from pluginseal.core.errors import CryptoUnavailableError
from pluginseal.core.lazy import LazyResource
from pluginseal.models.verification import SignatureAlgorithm

logger = logging.getLogger(__name__)

# Size of a raw P-256 ECDSA signature (r || s, 32 bytes each).
P256_RAW_SIGNATURE_SIZE = 64

# Exactly one SPKI block; PKCS#1 "RSA PUBLIC KEY" and bare bodies do not match.
_SPKI_PEM = re.compile(
    r"\A\s*-----BEGIN PUBLIC KEY-----(?P<body>[A-Za-z0-9+/=\s]*)-----END PUBLIC KEY-----\s*\Z"
)


# ---------------------------------------------------------------------------
# Shared decoding helpers
# ---------------------------------------------------------------------------


def decode_signature(signature_b64: str) -> bytes | None:
    """Strictly decode a base64 signature, or ``None`` if malformed."""
    if not signature_b64:
        return None
    try:
        decoded = base64.b64decode(signature_b64.strip(), validate=True)
    except (binascii.Error, ValueError):
        return None
    return decoded or None


def pem_to_der(public_key_pem: str) -> bytes | None:
    """Decode an armoured SPKI PEM to DER bytes.

    Returns ``None`` unless *public_key_pem* is a single
    ``-----BEGIN PUBLIC KEY-----`` block with a valid base64 body.  Both
    backends import keys through this function, so they accept exactly the
    same key texts.
    """
    match = _SPKI_PEM.match(public_key_pem or "")
    if match is None:
        return None
    body = "".join(match.group("body").split())
    if not body:
        return None
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        return None


# ---------------------------------------------------------------------------
# Backend protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class SignatureBackend(Protocol):
    """Verify a base64 signature over *data* with a PEM public key."""

    kind: BackendKind

    async def verify(
        self,
        data: str,
        signature_b64: str,
        public_key_pem: str,
        algorithm: SignatureAlgorithm,
    ) -> bool: ...


# ---------------------------------------------------------------------------
# Tier 1: server backend (cryptography)
# ---------------------------------------------------------------------------


def _load_server_primitives() -> SimpleNamespace:
    try:
        from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
        from cryptography.hazmat.primitives import hashes, serialization
        from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
        from cryptography.hazmat.primitives.asymmetric.utils import (
            decode_dss_signature,
            encode_dss_signature,
        )
    except ImportError as exc:
        raise CryptoUnavailableError(
            f"cryptography is not importable, server backend unavailable: {exc}"
        ) from exc
    logger.info("cryptography loaded — server signature backend ready.")
    return SimpleNamespace(
        InvalidSignature=InvalidSignature,
        UnsupportedAlgorithm=UnsupportedAlgorithm,
        hashes=hashes,
        serialization=serialization,
        ec=ec,
        padding=padding,
        rsa=rsa,
        decode_dss_signature=decode_dss_signature,
        encode_dss_signature=encode_dss_signature,
    )


class ServerBackend:
    """Signature verification through the ``cryptography`` library."""

    kind = BackendKind.SERVER

    def __init__(self) -> None:
        self._primitives: LazyResource[SimpleNamespace] = LazyResource(
            "server crypto backend", _load_server_primitives
        )

    async def verify(
        self,
        data: str,
        signature_b64: str,
        public_key_pem: str,
        algorithm: SignatureAlgorithm,
    ) -> bool:
        crypto = await self._primitives.get()
        algorithm = SignatureAlgorithm(algorithm)

        signature = decode_signature(signature_b64)
        if signature is None:
            logger.debug("Server backend: signature is not valid base64.")
            return False
        spki = pem_to_der(public_key_pem)
        if spki is None:
            logger.debug("Server backend: key is not an armoured SPKI PEM.")
            return False
        try:
            key = crypto.serialization.load_der_public_key(spki)
        except (ValueError, TypeError, crypto.UnsupportedAlgorithm) as exc:
            logger.debug("Server backend: public key import failed: %s", exc)
            return False

        payload = data.encode("utf-8")
        try:
            if algorithm is SignatureAlgorithm.RS256:
                if not isinstance(key, crypto.rsa.RSAPublicKey):
                    logger.debug("Server backend: RS256 requires an RSA key.")
                    return False
                key.verify(
                    signature, payload, crypto.padding.PKCS1v15(), crypto.hashes.SHA256()
                )
                return True

            if not (
                isinstance(key, crypto.ec.EllipticCurvePublicKey)
                and isinstance(key.curve, crypto.ec.SECP256R1)
            ):
                logger.debug("Server backend: ES256 requires a P-256 key.")
                return False
            der_signature = self._to_der(crypto, signature)
            if der_signature is None:
                return False
            key.verify(der_signature, payload, crypto.ec.ECDSA(crypto.hashes.SHA256()))
            return True
        except crypto.InvalidSignature:
            return False

    @staticmethod
    def _to_der(crypto: SimpleNamespace, signature: bytes) -> bytes | None:
        try:
            crypto.decode_dss_signature(signature)
            return signature
        except ValueError:
            pass
        if len(signature) != P256_RAW_SIGNATURE_SIZE:
            logger.debug("Server backend: ES256 signature is neither DER nor raw.")
            return None
        half = P256_RAW_SIGNATURE_SIZE // 2
        r = int.from_bytes(signature[:half], "big")
        s = int.from_bytes(signature[half:], "big")
        return crypto.encode_dss_signature(r, s)


# ---------------------------------------------------------------------------
# Tier 2: sandbox backend (PyJWT / JOSE)
# ---------------------------------------------------------------------------


def _load_jose_primitives() -> SimpleNamespace:
    try:
        from jwt.algorithms import get_default_algorithms, has_crypto
        from jwt.exceptions import InvalidKeyError
        from jwt.utils import der_to_raw_signature
    except ImportError as exc:
        raise CryptoUnavailableError(
            f"PyJWT is not importable, sandbox backend unavailable: {exc}"
        ) from exc
    if not has_crypto:
        raise CryptoUnavailableError(
            "PyJWT is installed without RSA/EC support, sandbox backend unavailable."
        )
    from cryptography.exceptions import UnsupportedAlgorithm
    from cryptography.hazmat.primitives.serialization import load_der_public_key

    algorithms = get_default_algorithms()
    logger.info("PyJWT loaded — sandbox signature backend ready.")
    return SimpleNamespace(
        algorithms={alg: algorithms[alg.value] for alg in SignatureAlgorithm},
        InvalidKeyError=InvalidKeyError,
        UnsupportedAlgorithm=UnsupportedAlgorithm,
        der_to_raw_signature=der_to_raw_signature,
        load_der_public_key=load_der_public_key,
    )


class SandboxBackend:
    """Signature verification through PyJWT's JWA algorithm objects."""

    kind = BackendKind.SANDBOX

    def __init__(self) -> None:
        self._primitives: LazyResource[SimpleNamespace] = LazyResource(
            "sandbox crypto backend", _load_jose_primitives
        )

    async def verify(
        self,
        data: str,
        signature_b64: str,
        public_key_pem: str,
        algorithm: SignatureAlgorithm,
    ) -> bool:
        jose = await self._primitives.get()
        algorithm = SignatureAlgorithm(algorithm)
        jwa = jose.algorithms[algorithm]

        signature = decode_signature(signature_b64)
        if signature is None:
            logger.debug("Sandbox backend: signature is not valid base64.")
            return False
        spki = pem_to_der(public_key_pem)
        if spki is None:
            logger.debug("Sandbox backend: key is not an armoured SPKI PEM.")
            return False
        try:
            key = jwa.prepare_key(jose.load_der_public_key(spki))
        except (
            ValueError, TypeError, jose.InvalidKeyError, jose.UnsupportedAlgorithm,
        ) as exc:
            logger.debug("Sandbox backend: SPKI import failed for %s: %s", algorithm.value, exc)
            return False

        if algorithm is SignatureAlgorithm.ES256:
            if getattr(key.curve, "name", None) != "secp256r1":
                logger.debug("Sandbox backend: ES256 requires a P-256 key.")
                return False
            signature = self._to_raw(jose, signature, key)
            if signature is None:
                return False

        return bool(jwa.verify(data.encode("utf-8"), key, signature))

    @staticmethod
    def _to_raw(jose: SimpleNamespace, signature: bytes, key: object) -> bytes | None:
        try:
            return jose.der_to_raw_signature(signature, key.curve)  # type: ignore[attr-defined]
        except ValueError:
            pass
        if len(signature) != P256_RAW_SIGNATURE_SIZE:
            logger.debug("Sandbox backend: ES256 signature is neither DER nor raw.")
            return None
        return signature


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def create_backend(kind: BackendKind) -> SignatureBackend:
    """Instantiate the backend for *kind*."""
    kind = BackendKind(kind)
    if kind is BackendKind.SERVER:
        return ServerBackend()
    return SandboxBackend()


def select_backend_kind(
    algorithm: SignatureAlgorithm,
    capabilities: CapabilityProbe | None = None,
) -> BackendKind:
    """Pick the preferred available backend for *algorithm*.

    Raises
    ------
    CryptoUnavailableError
        If the probe reports no backend at all.
    """
    probe = capabilities or default_capabilities()
    for kind in BACKEND_PREFERENCE:
        if probe.has_signature_backend(algorithm, kind):
            return kind
    raise CryptoUnavailableError(
        f"No signature verification primitive available for {SignatureAlgorithm(algorithm).value}"
    )
