from datetime import datetime, timezone
from sqlalchemy import text


async def ensure_migrations_table(conn):
    await conn.execute(text(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            name TEXT PRIMARY KEY,
            applied_at TEXT DEFAULT (datetime('now'))
        )
        """
    ))


async def has_migration(conn, name: str) -> bool:
    result = await conn.execute(text("SELECT 1 FROM schema_migrations WHERE name = :name"), {"name": name})
    return result.first() is not None


async def mark_migration(conn, name: str):
    await conn.execute(text("INSERT INTO schema_migrations(name, applied_at) VALUES (:name, :applied_at)"), {
        "name": name,
        "applied_at": datetime.now(timezone.utc).isoformat()
    })


async def index_exists(conn, table: str, index: str) -> bool:
    result = await conn.execute(text(f"PRAGMA index_list({table})"))
    for row in result.mappings():
        if row.get("name") == index:
            return True
    return False


async def add_user_id_index_to_messages(conn):
    # the model leaves this index to the migration so older databases get it too
    if await index_exists(conn, "messages", "ix_messages_user_id"):
        return
    await conn.execute(text("CREATE INDEX ix_messages_user_id ON messages (user_id)"))


MIGRATIONS = [
    ("202410_add_user_id_index_to_messages", add_user_id_index_to_messages),
]


async def run_migrations(conn):
    await ensure_migrations_table(conn)
    for name, handler in MIGRATIONS:
        if await has_migration(conn, name):
            continue
        await handler(conn)
        await mark_migration(conn, name)
