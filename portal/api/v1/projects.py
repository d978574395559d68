"""Project listing endpoints (public reads; admin create; owner-or-admin edit/delete)."""

from portal.api.v1.content import content_router
from portal.schemas.content import Project, ProjectCreate, ProjectUpdate

router = content_router(
    store_name="projects",
    label="Project",
    item_model=Project,
    create_model=ProjectCreate,
    update_model=ProjectUpdate,
)
