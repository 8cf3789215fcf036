import json

import pytest

from cloud_kitchen.core.config import BUNDLED_MENU_SEED
from cloud_kitchen.domain.normalizers import DEFAULT_CATEGORIES
from cloud_kitchen.infrastructure.drivers.file_driver import JsonDocumentFileDriver
from cloud_kitchen.infrastructure.drivers.sql_driver import SqlMenuDriver
from cloud_kitchen.infrastructure.fallback_store import FallbackStore
from cloud_kitchen.infrastructure.repositories.menu_store import MenuStore, load_menu_file

from conftest import DownDocumentDriver


def test_bundled_seed_parses():
    document = load_menu_file(BUNDLED_MENU_SEED)
    assert [c["key"] for c in document["categories"]] == [c["key"] for c in DEFAULT_CATEGORIES]


@pytest.mark.asyncio
async def test_first_read_persists_seed(menu_store, data_dir):
    menu = await menu_store.read()

    assert menu.items["starters"][0].name == "Samosa"
    stored = json.loads((data_dir / "menu.json").read_text())
    assert stored == menu.to_document()


@pytest.mark.asyncio
async def test_write_then_read(menu_store):
    saved = await menu_store.write({
        "categories": [{"key": "thali", "label": "Thali"}],
        "items": {"thali": [{"name": "Veg Thali", "price": "9"}]},
    })
    menu = await menu_store.read()

    assert menu == saved
    assert list(menu.items) == ["thali"]
    assert menu.items["thali"][0].price == 9.0


@pytest.mark.asyncio
async def test_rewriting_a_read_menu_changes_nothing(menu_store):
    first = await menu_store.read()
    assert await menu_store.write(first) == first
    assert await menu_store.read() == first


@pytest.mark.asyncio
async def test_missing_seed_gives_empty_menu(data_dir):
    store = MenuStore(
        FallbackStore(None, JsonDocumentFileDriver(data_dir / "menu.json")),
        seed_path=data_dir / "nope.yaml",
    )
    menu = await store.read()
    assert [c.key for c in menu.categories] == [c["key"] for c in DEFAULT_CATEGORIES]
    assert all(items == [] for items in menu.items.values())


@pytest.mark.asyncio
async def test_database_menu(session_factory, data_dir):
    file_driver = JsonDocumentFileDriver(data_dir / "menu.json")
    store = MenuStore(FallbackStore(SqlMenuDriver(session_factory), file_driver, label="menu"), BUNDLED_MENU_SEED)

    seeded = await store.read()
    assert await SqlMenuDriver(session_factory).load() == seeded.to_document()
    assert not file_driver.path.exists()

    await store.write({"categories": [{"key": "mains"}], "items": {"mains": [{"name": "Dal"}]}})
    assert (await store.read()).items["mains"][0].name == "Dal"


@pytest.mark.asyncio
async def test_database_down_uses_file(data_dir):
    file_driver = JsonDocumentFileDriver(data_dir / "menu.json")
    store = MenuStore(FallbackStore(DownDocumentDriver(), file_driver, label="menu"), BUNDLED_MENU_SEED)

    menu = await store.read()
    assert file_driver.path.exists()
    assert menu.items["mains"]


@pytest.mark.asyncio
async def test_unreadable_menu_file_is_left_alone(menu_store, data_dir):
    menu_file = data_dir / "menu.json"
    menu_file.parent.mkdir(parents=True)
    menu_file.write_text('{"categories": [{"key": "thali"}')

    menu = await menu_store.read()

    assert [c.key for c in menu.categories] == [c["key"] for c in DEFAULT_CATEGORIES]
    assert all(items == [] for items in menu.items.values())
    assert menu_file.read_text() == '{"categories": [{"key": "thali"}'
