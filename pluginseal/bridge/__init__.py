"""Bridge layer between pluginseal and the host's cryptography libraries.

Modules
-------
crypto_bridge
    Server (``cryptography``) and sandbox (PyJWT) signature backends
    behind one ``SignatureBackend`` protocol, selected by runtime
    capability.  When neither library is importable, selection fails
    closed with ``CryptoUnavailableError``.
"""
