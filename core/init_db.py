"""
Initialize the database for local development.

In production the abstract table belongs to the submission
application, this only creates it when missing.
"""
from core.db import create_db_and_tables
from core.logger import logger
import api.abstracts.models  # noqa: F401  registers the tables


def main():
    logger.info("Create tables...")
    create_db_and_tables()


if __name__ == "__main__":
    main()
