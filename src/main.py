"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.health import router as health_router
from src.api.inventory import router as inventory_router
from src.config import settings
from src.core.crew.traits import TraitCatalog
from src.core.event_bus import EventBus
from src.core.item.models import ContainerKind
from src.core.item.recipes import RecipeBook
from src.core.item.registry import ItemCatalog
from src.core.logging import get_logger, setup_logging
from src.db.database import SessionLocal, engine as db_engine
from src.db.models import Base
from src.services.inventory_service import InventoryService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


def load_catalogs() -> tuple[ItemCatalog, TraitCatalog, RecipeBook]:
    """정적 데이터 로드. trait → item(trait 참조 검사) → recipe 순."""
    traits = TraitCatalog()
    traits.load_from_json(settings.TRAIT_CATALOG_PATH)

    catalog = ItemCatalog()
    catalog.load_from_json(settings.ITEM_CATALOG_PATH, known_traits=traits.max_ranks())

    recipes = RecipeBook()
    recipes.load_from_json(settings.RECIPE_BOOK_PATH)
    for recipe in recipes.get_all():
        for item_id in (*recipe.inputs, recipe.result):
            if catalog.get(item_id) is None:
                logger.warning("Recipe %s references unknown item: %s", recipe.result, item_id)

    return catalog, traits, recipes


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    logger.info("Loading catalogs...")
    catalog, traits, recipes = load_catalogs()

    # InventoryService 초기화
    logger.info("Initializing InventoryService...")
    event_bus = EventBus()
    db_session = SessionLocal()
    inventory_service = InventoryService(
        db=db_session,
        event_bus=event_bus,
        catalog=catalog,
        traits=traits,
        recipes=recipes,
        capacities={
            ContainerKind.PLAYER: settings.PLAYER_CAPACITY,
            ContainerKind.SAFE: settings.SAFE_CAPACITY,
            ContainerKind.STORAGE: settings.STORAGE_CAPACITY,
        },
        max_energy=settings.MAX_ENERGY,
        craft_slots=settings.CRAFT_SLOTS,
        consume_when_capped=settings.CONSUME_WHEN_CAPPED,
    )
    app.state.inventory_service = inventory_service
    app.state.event_bus = event_bus
    logger.info(
        "InventoryService initialized (%d items, %d recipes).",
        catalog.count(),
        recipes.count(),
    )

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Crime Boss Inventory Engine", lifespan=lifespan)

app.include_router(health_router)
app.include_router(inventory_router)
