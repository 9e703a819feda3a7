#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import logging

from hls_signed_proxy.errors import (
    InvalidSignedUrl,
    MissingParameters,
    ResourceNotFound,
    UpstreamFailure,
    UpstreamFetchError,
)
from hls_signed_proxy.signing import TOKEN_KIND_SEGMENT
from hls_signed_proxy.upstream import UpstreamResponse, build_upstream_headers

proxy_logger = logging.getLogger("proxy")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


async def resolve_segment(resource_id, signature, exp, codec, store, client):
    """
    Turn a signed local URL back into the remote resource it stands for.

    Invalid and expired tokens are rejected with the same error so callers
    cannot tell which check failed. A token that verifies but whose store
    entry is gone is reported as not found.
    """
    if not resource_id or not signature or not exp:
        raise MissingParameters()

    if not codec.verify(resource_id, signature, exp, TOKEN_KIND_SEGMENT):
        raise InvalidSignedUrl()

    real_url = await store.get(resource_id)
    if real_url is None:
        proxy_logger.info("Resource %s not found or expired", resource_id)
        raise ResourceNotFound()

    proxy_logger.debug("Fetching actual resource from: %s", real_url)
    try:
        resp = await client.fetch(real_url)
    except UpstreamFetchError as e:
        proxy_logger.error("Failed to fetch resource '%s': %s", real_url, e.reason)
        raise UpstreamFailure("Error fetching segment content")

    return UpstreamResponse(resp.body, resp.content_type or DEFAULT_CONTENT_TYPE, resp.url)


async def fetch_resource(url, ref, client):
    """Unsigned pass-through fetch with an optional Referer override."""
    proxy_logger.debug("Fetching image from: %s", url)
    try:
        resp = await client.fetch(url, headers=build_upstream_headers(ref))
    except UpstreamFetchError as e:
        proxy_logger.error("Failed to fetch image '%s': %s", url, e.reason)
        raise UpstreamFailure("Error fetching image content")

    return UpstreamResponse(resp.body, resp.content_type or DEFAULT_CONTENT_TYPE, resp.url)
