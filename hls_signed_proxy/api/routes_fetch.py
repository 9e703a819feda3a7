#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import asyncio
import logging

from quart import current_app, jsonify, request, Response

from hls_signed_proxy.api import blueprint, index_blueprint
from hls_signed_proxy.errors import MissingParameters, ProxyError
from hls_signed_proxy.manifest_rewriter import fetch_and_update_playlist
from hls_signed_proxy.resolver import fetch_resource, resolve_segment
from hls_signed_proxy.resource_store import periodic_store_cleanup
from hls_signed_proxy.upstream import build_upstream_headers

proxy_logger = logging.getLogger("proxy")


def _services():
    return current_app.extensions["hls_signed_proxy"]


@blueprint.record_once
def _register_startup(state):
    app = state.app

    @app.before_serving
    async def _start_periodic_store_cleanup():
        services = app.extensions["hls_signed_proxy"]
        services["cleanup_task"] = asyncio.create_task(
            periodic_store_cleanup(services["resource_store"], interval=services["config"].cleanup_interval)
        )

    @app.after_serving
    async def _stop_periodic_store_cleanup():
        task = app.extensions["hls_signed_proxy"].pop("cleanup_task", None)
        if task is not None:
            task.cancel()


@blueprint.errorhandler(ProxyError)
async def _handle_proxy_error(error):
    return jsonify({"error": error.message}), error.status_code


@index_blueprint.route("/", methods=["GET"])
async def index():
    return jsonify({"status": "ok"})


@blueprint.route("/", methods=["GET"])
async def proxy_m3u8():
    """
    Fetch the remote playlist given by ?url= and rewrite every media reference
    to a signed local URL. The optional ?ref= sets the upstream Referer.
    """
    source_url = request.args.get("url")
    if not source_url:
        raise MissingParameters("No URL provided")

    services = _services()
    proxy_logger.debug("Fetching M3U8 file from: %s", source_url)
    result = await fetch_and_update_playlist(
        source_url,
        services["upstream_client"],
        services["resource_store"],
        services["token_codec"],
        headers=build_upstream_headers(request.args.get("ref")),
    )
    return Response(result.body, content_type=result.content_type, status=200)


@blueprint.route("/segment/resource", methods=["GET"])
async def proxy_segment_resource():
    services = _services()
    resp = await resolve_segment(
        request.args.get("resourceId"),
        request.args.get("sig"),
        request.args.get("exp"),
        services["token_codec"],
        services["resource_store"],
        services["upstream_client"],
    )
    proxy_logger.debug("Segment served successfully")
    return Response(resp.body, content_type=resp.content_type, status=200)


@blueprint.route("/image", methods=["GET"])
async def proxy_image():
    source_url = request.args.get("url")
    if not source_url:
        raise MissingParameters("No URL provided")

    resp = await fetch_resource(source_url, request.args.get("ref"), _services()["upstream_client"])
    proxy_logger.debug("Image served successfully")
    return Response(resp.body, content_type=resp.content_type, status=200)
