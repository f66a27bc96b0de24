"""Shared test fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.crew.models import CrewMember
from src.core.crew.traits import TraitCatalog
from src.core.event_bus import EventBus
from src.core.item.models import ContainerKind
from src.core.item.recipes import RecipeBook
from src.core.item.registry import ItemCatalog
from src.core.state import GameState, new_game_state
from src.db.database import get_db
from src.db.models import Base
from src.main import app
from src.services.inventory_service import InventoryService

ITEMS_PATH = Path("src/data/items.json")
TRAITS_PATH = Path("src/data/traits.json")
RECIPES_PATH = Path("src/data/recipes.json")

CAPACITIES = {
    ContainerKind.PLAYER: 20,
    ContainerKind.SAFE: 5,
    ContainerKind.STORAGE: 10,
}

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    return TestClient(app)


@pytest.fixture()
def db_session() -> Session:
    """Raw database session on a fresh in-memory schema."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def traits() -> TraitCatalog:
    catalog = TraitCatalog()
    catalog.load_from_json(TRAITS_PATH)
    return catalog


@pytest.fixture()
def catalog(traits: TraitCatalog) -> ItemCatalog:
    items = ItemCatalog()
    items.load_from_json(ITEMS_PATH, known_traits=traits.max_ranks())
    return items


@pytest.fixture()
def recipes() -> RecipeBook:
    book = RecipeBook()
    book.load_from_json(RECIPES_PATH)
    return book


@pytest.fixture()
def vinnie() -> CrewMember:
    return CrewMember(member_id="vinnie", name="Vinnie", hp=40, max_hp=100)


@pytest.fixture()
def state(vinnie: CrewMember) -> GameState:
    """빈 용기 3개 + 조직원 2명"""
    sal = CrewMember(member_id="sal", name="Sal", hp=80, max_hp=80, stress=30)
    return new_game_state([vinnie, sal], CAPACITIES, max_energy=50, energy=20, heat=40)


@pytest.fixture()
def service(db_session: Session, catalog, traits, recipes) -> InventoryService:
    """인메모리 DB + EventBus + InventoryService"""
    return InventoryService(
        db=db_session,
        event_bus=EventBus(),
        catalog=catalog,
        traits=traits,
        recipes=recipes,
        capacities=CAPACITIES,
    )
