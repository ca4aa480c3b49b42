from typing import Annotated

from fastapi import Depends, Header, Request

from price_alerts.core.exceptions import RateLimited, Unauthorized
from price_alerts.core.rate_limit import alert_limiter
from price_alerts.modules.auth.schemas import Identity
from price_alerts.modules.auth.service import verify_token
from price_alerts.modules.stats.service import schedule_usage


def _route_of(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    if not authorization:
        raise Unauthorized("Unauthorized: No token provided")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Unauthorized: No token provided")

    identity = verify_token(token)
    request.state.user = identity

    schedule_usage(_route_of(request), identity)
    return identity


CurrentUserDep = Annotated[Identity, Depends(get_current_user)]


async def limit_alert_creation(user: CurrentUserDep) -> None:
    if not alert_limiter.hit(str(user.uid)):
        raise RateLimited(alert_limiter.message)
