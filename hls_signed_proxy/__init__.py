#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import logging
from logging.config import dictConfig
from importlib import import_module

from quart import Quart

from hls_signed_proxy.config import ProxyConfig
from hls_signed_proxy.resource_store import ResourceStore
from hls_signed_proxy.signing import TokenCodec
from hls_signed_proxy.upstream import UpstreamClient

dictConfig({
    'version':    1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s:%(levelname)s:%(name)s: %(message)s',
        }
    },
    'handlers':   {
        'wsgi': {
            'class':     'logging.StreamHandler',
            'stream':    'ext://sys.stderr',
            'formatter': 'default'
        }
    },
    'root':       {
        'level':    'INFO',
        'handlers': ['wsgi']
    }
})

CORS_HEADERS = {
    'Access-Control-Allow-Origin':  '*',
    'Access-Control-Allow-Methods': 'GET, POST, PUT, DELETE, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
    'Access-Control-Max-Age':       '3600',
}


def create_app(config=None):
    if config is None:
        config = ProxyConfig.from_environ()

    # Create app
    app = Quart(__name__, instance_relative_config=True)
    app.extensions["hls_signed_proxy"] = {
        "config":          config,
        "token_codec":     TokenCodec(config.secret_key, ttl=config.token_ttl),
        "resource_store":  ResourceStore(ttl=config.resource_ttl),
        "upstream_client": UpstreamClient(timeout=config.upstream_timeout),
    }

    # Register the route blueprints
    module = import_module('hls_signed_proxy.api.routes_fetch')
    app.register_blueprint(module.index_blueprint)
    app.register_blueprint(module.blueprint)

    @app.after_request
    async def apply_cors(response):
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    level = logging.DEBUG if config.enable_debugging else logging.INFO
    app.logger.setLevel(level)
    for name in ('proxy', 'signing', 'store', 'config'):
        logging.getLogger(name).setLevel(level)

    if config.uses_insecure_secret:
        app.logger.warning("Running with the insecure default SECRET_KEY, do not use this in production")

    return app
