# import_catalog.py - load titles from a CSV export into the catalog database
import logging
import sys

import pandas as pd
from sqlalchemy import create_engine

import config
from catalog_store import SqliteCatalogStore

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"name", "release_year", "duration", "genre", "poster", "video_path"}
TITLE_FIELDS = ["name", "release_year", "duration", "genre", "poster", "video_path", "views"]


def import_titles(csv_path, database=None):
    """Append every titled row of csv_path to the titles table; return the count."""
    database = database or config.DATABASE
    df = pd.read_csv(csv_path)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"CSV is missing required columns: {sorted(missing)}")

    if "views" not in df.columns:
        df["views"] = 0
    df = df[TITLE_FIELDS].copy()
    df["name"] = df["name"].fillna("").astype(str).str.strip()
    skipped = int((df["name"] == "").sum())
    df = df[df["name"] != ""].copy()
    df["views"] = df["views"].fillna(0).astype(int)
    df["genre"] = df["genre"].fillna("")

    SqliteCatalogStore(database).init_schema()
    engine = create_engine(f"sqlite:///{database}")
    try:
        df.to_sql(config.TITLES_TABLE, engine, if_exists='append', index=False)
    finally:
        engine.dispose()

    if skipped:
        logger.warning("Skipped %d rows with no title name", skipped)
    logger.info("Imported %d rows into %s -> %s", len(df), database, config.TITLES_TABLE)
    return len(df)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    if len(sys.argv) < 2:
        print("usage: python import_catalog.py titles.csv [catalog.db]")
        sys.exit(2)
    count = import_titles(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
    print("Imported", count, "titles")
