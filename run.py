#!/usr/bin/env python3
# -*- coding:utf-8 -*-
import asyncio

from hls_signed_proxy import create_app
from hls_signed_proxy.config import ProxyConfig

config = ProxyConfig.from_environ()

# Create app
app = create_app(config)
if config.enable_debugging:
    app.logger.info(' DEBUGGING   = ' + str(config.enable_debugging))

if __name__ == "__main__":
    # Create a custom loop
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    # Start Quart server
    app.logger.info("Server is running on port %s", config.port)
    app.run(loop=loop, debug=config.enable_debugging, host='0.0.0.0', port=config.port)
    app.logger.info("Quart server completed.")
