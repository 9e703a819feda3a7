#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import asyncio
import logging
from collections import namedtuple

import aiohttp

from hls_signed_proxy.errors import UpstreamFetchError

proxy_logger = logging.getLogger("proxy")

DEFAULT_UPSTREAM_TIMEOUT = 30

UpstreamResponse = namedtuple("UpstreamResponse", ["body", "content_type", "url"])


def build_upstream_headers(ref=None):
    headers = {}
    if ref:
        headers["Referer"] = ref
    return headers


class UpstreamClient:
    """
    Fetches remote manifests, segments and images with aiohttp.

    Any failure (network error, timeout, invalid URL or a non-2xx status) is
    raised as UpstreamFetchError. No retries are attempted.
    """

    def __init__(self, timeout=DEFAULT_UPSTREAM_TIMEOUT):
        self.timeout = timeout

    async def fetch(self, url, headers=None, as_text=False):
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=headers) as resp:
                    if not 200 <= resp.status < 300:
                        raise UpstreamFetchError(url, f"upstream returned HTTP {resp.status}", status=resp.status)

                    # Actual URL after any redirects
                    response_url = str(resp.url)
                    if as_text:
                        body = await resp.text(errors="replace")
                    else:
                        body = await resp.read()
                    return UpstreamResponse(body, resp.headers.get("Content-Type"), response_url)
        except asyncio.TimeoutError as exc:
            raise UpstreamFetchError(url, "upstream request timed out") from exc
        except (aiohttp.ClientError, ValueError) as exc:
            raise UpstreamFetchError(url, str(exc) or exc.__class__.__name__) from exc
