"""Shared case scaffolding constants."""

from __future__ import annotations

REQUEST_TEMPLATE_SUFFIX = ".request.json"
RESPONSE_TEMPLATE_SUFFIX = ".response.json"
