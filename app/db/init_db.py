import logging

from sqlalchemy import inspect

from app.db.session import db_manager
from app.db.base import Base

logger = logging.getLogger("app")


def create_all_tables() -> bool:
    try:
        engine = db_manager.engine
        existing_tables = inspect(engine).get_table_names()

        Base.metadata.create_all(bind=engine)

        new_tables = set(inspect(engine).get_table_names()) - set(existing_tables)
        if new_tables:
            logger.info(f"Created new tables: {new_tables}")

        return True
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        return False


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Creating database tables")
    create_all_tables()
    logger.info("Database tables created")
