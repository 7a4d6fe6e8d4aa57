import asyncio
import sys
from pathlib import Path


async def recreate_db():
    # Ensure project root on import path
    project_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(project_root))

    from chatroom.config import settings  # type: ignore
    from chatroom.database import create_tables  # type: ignore

    # Remove existing SQLite file
    db_path = Path(settings.DATABASE_PATH)
    if db_path.exists():
        db_path.unlink()

    await create_tables()


if __name__ == '__main__':
    asyncio.run(recreate_db())
    print('Database recreated.')
