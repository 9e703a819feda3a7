#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import logging
from collections import namedtuple
from urllib.parse import urljoin

from hls_signed_proxy.errors import UpstreamFailure, UpstreamFetchError
from hls_signed_proxy.resource_store import new_resource_id
from hls_signed_proxy.signing import TOKEN_KIND_SEGMENT, signed_path

proxy_logger = logging.getLogger("proxy")

PLAYLIST_HEADER = "#EXTM3U"
HLS_CONTENT_TYPE = "application/vnd.apple.mpegurl"
PASSTHROUGH_CONTENT_TYPE = "text/plain"

RewriteResult = namedtuple("RewriteResult", ["body", "content_type", "rewritten"])


def is_playlist(content):
    return content.startswith(PLAYLIST_HEADER)


def is_reference_line(line):
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def resolve_reference(line, source_url):
    """
    Return the absolute URL a media reference line points at, or None for
    blank and tag/comment lines. Raises ValueError for unparseable references.
    """
    if not is_reference_line(line):
        return None
    return urljoin(source_url, line.strip())


async def register_reference(absolute_url, store, codec):
    """Store ``absolute_url`` under a fresh identifier and return its signed local URL."""
    resource_id = new_resource_id()
    await store.put(resource_id, absolute_url)

    token = codec.mint(resource_id, TOKEN_KIND_SEGMENT)
    proxy_logger.debug("Rewriting reference '%s' -> resource %s", absolute_url, resource_id)
    return signed_path(token)


async def rewrite_manifest(manifest_text, source_url, store, codec):
    if not is_playlist(manifest_text):
        proxy_logger.debug("Not a valid M3U8 (no %s at start), returning raw content", PLAYLIST_HEADER)
        return RewriteResult(manifest_text, PASSTHROUGH_CONTENT_TYPE, False)

    lines = manifest_text.split("\n")
    # Resolve every reference before writing to the store so a bad line leaves no entries behind
    resolved_urls = [resolve_reference(line, source_url) for line in lines]

    updated_lines = []
    for line, absolute_url in zip(lines, resolved_urls):
        if absolute_url is None:
            updated_lines.append(line)
        else:
            updated_lines.append(await register_reference(absolute_url, store, codec))

    # Join the updated lines into a single string
    modified_playlist = "\n".join(updated_lines)
    return RewriteResult(modified_playlist, HLS_CONTENT_TYPE, True)


async def fetch_and_update_playlist(source_url, client, store, codec, headers=None):
    try:
        resp = await client.fetch(source_url, headers=headers, as_text=True)
    except UpstreamFetchError as e:
        proxy_logger.error("Failed to fetch the original playlist '%s': %s", source_url, e.reason)
        raise UpstreamFailure("Failed to fetch M3U8 content")

    try:
        result = await rewrite_manifest(resp.body, resp.url or source_url, store, codec)
    except ValueError as e:
        proxy_logger.error("Failed to rewrite the playlist '%s': %s", source_url, e)
        raise UpstreamFailure("Failed to fetch M3U8 content")

    if result.rewritten:
        proxy_logger.info("Rewrote playlist '%s'", source_url)
    return result
