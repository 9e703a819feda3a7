#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import logging
import os

from hls_signed_proxy.errors import ConfigError
from hls_signed_proxy.resource_store import DEFAULT_RESOURCE_TTL
from hls_signed_proxy.signing import DEFAULT_TOKEN_TTL
from hls_signed_proxy.upstream import DEFAULT_UPSTREAM_TIMEOUT

config_logger = logging.getLogger("config")

# Development fallback only. Never run a real deployment with this key.
INSECURE_DEFAULT_SECRET = "update-this-secret"

DEFAULT_PORT = 3000
DEFAULT_CLEANUP_INTERVAL = 60


def _positive_number(environ, name, default, cast=int):
    raw_value = environ.get(name)
    if raw_value is None or raw_value.strip() == "":
        return default
    try:
        value = cast(raw_value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw_value}'")
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero, got '{raw_value}'")
    return value


class ProxyConfig:
    """Process-wide settings, built once at startup and handed to create_app()."""

    def __init__(self,
                 secret_key=INSECURE_DEFAULT_SECRET,
                 port=DEFAULT_PORT,
                 environment="development",
                 token_ttl=DEFAULT_TOKEN_TTL,
                 resource_ttl=DEFAULT_RESOURCE_TTL,
                 cleanup_interval=DEFAULT_CLEANUP_INTERVAL,
                 upstream_timeout=DEFAULT_UPSTREAM_TIMEOUT,
                 enable_debugging=False):
        self.secret_key = secret_key
        self.port = port
        self.environment = environment
        self.token_ttl = token_ttl
        self.resource_ttl = resource_ttl
        self.cleanup_interval = cleanup_interval
        self.upstream_timeout = upstream_timeout
        self.enable_debugging = enable_debugging

    @property
    def is_production(self):
        return self.environment == "production"

    @property
    def uses_insecure_secret(self):
        return self.secret_key == INSECURE_DEFAULT_SECRET

    @classmethod
    def from_environ(cls, environ=None):
        if environ is None:
            environ = os.environ

        environment = environ.get("HLS_PROXY_ENV", "development").strip().lower()
        secret_key = environ.get("SECRET_KEY")
        if not secret_key:
            if environment == "production":
                raise ConfigError("SECRET_KEY must be set when HLS_PROXY_ENV=production")
            config_logger.warning("SECRET_KEY is not set, signing URLs with the insecure development key")
            secret_key = INSECURE_DEFAULT_SECRET

        return cls(
            secret_key=secret_key,
            port=_positive_number(environ, "PORT", DEFAULT_PORT),
            environment=environment,
            token_ttl=_positive_number(environ, "HLS_PROXY_TOKEN_TTL", DEFAULT_TOKEN_TTL),
            resource_ttl=_positive_number(environ, "HLS_PROXY_RESOURCE_TTL", DEFAULT_RESOURCE_TTL),
            cleanup_interval=_positive_number(environ, "HLS_PROXY_CLEANUP_INTERVAL", DEFAULT_CLEANUP_INTERVAL),
            upstream_timeout=_positive_number(environ, "HLS_PROXY_UPSTREAM_TIMEOUT", DEFAULT_UPSTREAM_TIMEOUT,
                                              cast=float),
            enable_debugging=environ.get("ENABLE_DEBUGGING", "false").lower() == "true",
        )
