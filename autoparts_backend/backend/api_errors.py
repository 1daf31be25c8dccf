# backend/api_errors.py

from rest_framework.response import Response


def error_response(*, code: str, message: str, http_status: int, **extra):
    """
    Canonical API error response.

    Body: {"error": {"code": ..., "message": ..., **extra}}
    """
    payload = {"code": code, "message": message}
    payload.update(extra)
    return Response({"error": payload}, status=http_status)
