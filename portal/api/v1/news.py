"""News endpoints (public reads; admin create; owner-or-admin edit/delete)."""

from portal.api.v1.content import content_router
from portal.schemas.content import News, NewsCreate, NewsUpdate

router = content_router(
    store_name="news",
    label="News item",
    item_model=News,
    create_model=NewsCreate,
    update_model=NewsUpdate,
)
