from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.policies import require_authenticated


class MeView(APIView):
    """Echo the identity carried by the bearer token.

    Lets clients check a token (and its role) before calling the
    order endpoints.
    """

    def get(self, request: Request) -> Response:
        identity = require_authenticated(request)
        return Response(
            {
                "id": str(identity.id),
                "email": identity.email,
                "role": identity.role.value,
            }
        )
