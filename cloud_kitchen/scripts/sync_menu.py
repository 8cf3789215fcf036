"""
Push a menu file into the remote `menus` row.

    python -m cloud_kitchen.scripts.sync_menu [path/to/menu.json|menu.yaml]

Without a path, DATA_DIR/menu.json is used if present, else the bundled seed.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from cloud_kitchen.core.config import get_settings
from cloud_kitchen.domain.normalizers import normalize_menu
from cloud_kitchen.infrastructure.database import create_session_factory, init_schema
from cloud_kitchen.infrastructure.drivers.sql_driver import MENU_ROW_ID, SqlMenuDriver
from cloud_kitchen.infrastructure.repositories.menu_store import load_menu_file

logger = logging.getLogger(__name__)

app = typer.Typer(name="sync-menu", help="Sync a menu file to the remote datastore", add_completion=False)


def pick_default_source(settings) -> Path:
    candidates = [Path(settings.DATA_DIR) / "menu.json", Path(settings.MENU_SEED_PATH)]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    raise FileNotFoundError("No menu seed file found. Add data/menu.json or a menu.yaml seed.")


def sync_menu(source: Path, database_url: str) -> int:
    """Upsert `source` as the active menu. Returns the number of menu items written."""
    menu = normalize_menu(load_menu_file(source))
    engine, session_factory = create_session_factory(database_url)
    init_schema(engine)
    asyncio.run(SqlMenuDriver(session_factory).save(menu.to_document()))
    return sum(len(items) for items in menu.items.values())


@app.command()
def main(
    source: Optional[Path] = typer.Argument(None, help="Menu file (.json, .yaml, .yml)"),
):
    """Upsert the menu into the `menus` table."""
    settings = get_settings()
    if not settings.DATABASE_URL:
        typer.echo("DATABASE_URL must be set.", err=True)
        raise typer.Exit(code=1)

    try:
        path = source or pick_default_source(settings)
        count = sync_menu(path, settings.DATABASE_URL)
    except Exception as e:
        logger.error(f"❌ Menu sync failed: {e}")
        typer.echo(f"Menu sync failed: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Synced {count} menu items from {path} to row '{MENU_ROW_ID}'.")


if __name__ == "__main__":
    app()
