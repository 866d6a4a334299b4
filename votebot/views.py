"""HTTP endpoints: health check and the management API used by RemoteManager."""

import hmac
import logging
from dataclasses import asdict

from django.conf import settings
from django.http import JsonResponse
from rest_framework.decorators import api_view
from rest_framework.response import Response

from votebot.manager import AddTeamRequest, LocalManager, ManagementError

logger = logging.getLogger("votebot.views")


def health_check(request):
    """Simple health-check endpoint."""
    return JsonResponse({"status": "ok"})


def _authorized(request) -> bool:
    expected = f"Bearer {settings.VOTEBOT_MANAGER_KEY}"
    return hmac.compare_digest(request.headers.get("Authorization", ""), expected)


@api_view(["POST"])
def add_team(request):
    """Register a team from a bot token (``{"auth_token": "xoxb-..."}``)."""
    if not settings.VOTEBOT_MANAGER_KEY:
        return Response({"error": "Management API is disabled"}, status=404)
    if not _authorized(request):
        return Response({"error": "Missing or invalid Authorization header"}, status=401)

    auth_token = str(request.data.get("auth_token", "")).strip()
    if not auth_token:
        return Response({"error": "auth_token is required"}, status=400)

    try:
        result = LocalManager().add_team(AddTeamRequest(auth_token=auth_token))
    except ManagementError as exc:
        logger.warning("Remote add_team failed: %s", exc)
        return Response({"error": str(exc)}, status=400)

    return Response({"team": asdict(result)})
