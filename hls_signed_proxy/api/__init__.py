#!/usr/bin/env python3
# -*- coding:utf-8 -*-
from quart import Blueprint

blueprint = Blueprint("fetch", __name__, url_prefix="/fetch")
index_blueprint = Blueprint("index", __name__)
