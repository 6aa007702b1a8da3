"""API routers."""

from helpdesk.routers.api_keys import router as api_keys_router
from helpdesk.routers.attachments import router as attachments_router
from helpdesk.routers.comments import router as comments_router
from helpdesk.routers.contacts import router as contacts_router
from helpdesk.routers.health import router as health_router
from helpdesk.routers.organizations import router as organizations_router
from helpdesk.routers.status_codes import router as status_codes_router
from helpdesk.routers.teams import router as teams_router
from helpdesk.routers.tickets import router as tickets_router
from helpdesk.routers.users import router as users_router

__all__ = [
    "health_router",
    "organizations_router",
    "users_router",
    "api_keys_router",
    "teams_router",
    "contacts_router",
    "tickets_router",
    "comments_router",
    "attachments_router",
    "status_codes_router",
]
