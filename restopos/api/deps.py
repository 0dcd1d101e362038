from dataclasses import dataclass

from fastapi import Header, HTTPException, status

from restopos.events.notification_bus import NotificationBus
from restopos.models import Role


@dataclass
class Actor:
    """Identity and role supplied by the authentication layer."""
    id: str
    role: Role


async def get_actor(
    x_actor_id: str = Header(..., description="Authenticated user id."),
    x_actor_role: str = Header(..., description="Authenticated user role."),
) -> Actor:
    try:
        role = Role(x_actor_role)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Unknown role '{x_actor_role}'.")
    return Actor(id=x_actor_id, role=role)


def bus_for(actor: Actor) -> NotificationBus:
    """A request-scoped bus: publishes into the shared log as the actor's view."""
    return NotificationBus(actor.role)
