"""
Pelayanan Backend — CORS Middleware
=====================================

What:  Starlette's CORSMiddleware, except that OPTIONS on the status-change
       endpoint (/api/submissions/{id}) always reaches its own route.
How:   That route answers every preflight with 200 and `Allow-Origin: *`, so
       browsers on any origin can reach PATCH even when CORS_ORIGINS is
       restricted for the rest of the API.
"""

import re

from starlette.middleware.cors import CORSMiddleware
from starlette.types import Receive, Scope, Send

OPEN_PREFLIGHT_PATH = re.compile(r"^/api/submissions/[^/]+/?$")


class SubmissionCORSMiddleware(CORSMiddleware):

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] == "http"
            and scope["method"] == "OPTIONS"
            and OPEN_PREFLIGHT_PATH.match(scope["path"])
        ):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
