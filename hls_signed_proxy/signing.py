#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import hashlib
import hmac
import logging
import time
from collections import namedtuple
from urllib.parse import urlencode

signing_logger = logging.getLogger("signing")

TOKEN_KIND_SEGMENT = "segment"
TOKEN_KINDS = (TOKEN_KIND_SEGMENT,)

DEFAULT_TOKEN_TTL = 600  # 10 minutes

SEGMENT_RESOURCE_PATH = "/fetch/segment/resource"

SignedToken = namedtuple("SignedToken", ["resource_id", "signature", "exp", "kind"])


class TokenCodec:
    """
    Builds and verifies self-certifying signed URLs for proxied resources.

    A token binds a resource identifier, an absolute expiry (UNIX seconds)
    and a token kind under an HMAC-SHA256 keyed by the server secret.
    Nothing is stored; validity is recomputed from the token fields.
    """

    def __init__(self, secret, ttl=DEFAULT_TOKEN_TTL, clock=time.time):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.ttl = int(ttl)
        self._clock = clock

    def _now(self):
        return int(self._clock())

    def _sign(self, resource_id, exp, kind):
        payload = f"{resource_id}{exp}{kind}".encode("utf-8")
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def mint(self, resource_id, kind=TOKEN_KIND_SEGMENT):
        if kind not in TOKEN_KINDS:
            raise ValueError(f"Unknown token kind '{kind}'")
        exp = self._now() + self.ttl
        return SignedToken(resource_id, self._sign(resource_id, exp, kind), exp, kind)

    def verify(self, resource_id, signature, exp, kind=TOKEN_KIND_SEGMENT):
        try:
            exp_value = int(exp)
        except (TypeError, ValueError):
            signing_logger.debug("Rejecting token for '%s': malformed expiry", resource_id)
            return False

        if exp_value < self._now():
            signing_logger.debug("Rejecting token for '%s': expired at %s", resource_id, exp_value)
            return False

        if not isinstance(signature, str) or not isinstance(resource_id, str):
            return False
        # Sign the expiry exactly as supplied so non-canonical forms never match
        expected = self._sign(resource_id, exp, kind)
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
            signing_logger.debug("Rejecting token for '%s': signature mismatch", resource_id)
            return False
        return True

    def verify_token(self, token):
        return self.verify(token.resource_id, token.signature, str(token.exp), token.kind)


def signed_path(token, path=SEGMENT_RESOURCE_PATH):
    query = urlencode({
        "resourceId": token.resource_id,
        "sig":        token.signature,
        "exp":        token.exp,
    })
    return f"{path}?{query}"
