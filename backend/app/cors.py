"""CORS middleware answering pre-flight requests with an empty 204."""

from fastapi import Response
from fastapi.datastructures import Headers
from fastapi.middleware.cors import CORSMiddleware

_BODY_HEADERS = {"content-length", "content-type"}


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose accepted pre-flights are 204 No Content.

    Rejected pre-flights keep Starlette's 400 response.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {key: value for key, value in response.headers.items() if key.lower() not in _BODY_HEADERS}
        return Response(status_code=204, headers=headers)
