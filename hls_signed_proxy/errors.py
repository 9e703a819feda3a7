#!/usr/bin/env python3
# -*- coding:utf-8 -*-


class ConfigError(ValueError):
    pass


class UpstreamFetchError(Exception):
    """Raised by the upstream client when a remote resource cannot be fetched."""

    def __init__(self, url, reason, status=None):
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason
        self.status = status


class ProxyError(Exception):
    """
    Base for errors that map directly onto an HTTP response.

    The message is what the client sees, so it must never include upstream
    details or anything derived from the signing secret.
    """
    status_code = 500
    message = "Internal proxy error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingParameters(ProxyError):
    status_code = 400
    message = "Missing signed URL params"


class InvalidSignedUrl(ProxyError):
    status_code = 400
    message = "Invalid or expired signed URL"


class ResourceNotFound(ProxyError):
    status_code = 404
    message = "Resource not found or expired"


class UpstreamFailure(ProxyError):
    status_code = 500
