import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.pool import NullPool


ANALYTICS_TABLE = 'analytics'

RECORD_COLUMNS = [
    'ip', 'dt', 'url', 'referer', 'ua', 'status',
    'country', 'city', 'latitude', 'longitude',
]

KEY_COLUMNS = ['ip', 'dt', 'url']

logger = logging.getLogger('datastore')


@dataclass(frozen=True)
class Record:
    ip: str
    dt: int
    url: str
    referer: Optional[str] = None
    ua: Optional[str] = None
    status: int = 200
    country: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


def get_engine(path: Union[str, Path], **kwargs) -> Engine:
    # NullPool: closing a connection really closes the file handle
    url = URL.create('sqlite', database=str(path))
    return create_engine(url, poolclass=NullPool, **kwargs)


def ensure_schema(engine: Engine):
    ddl = f"""
    CREATE TABLE IF NOT EXISTS {ANALYTICS_TABLE} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        ip TEXT NOT NULL,
        dt INTEGER NOT NULL,
        url TEXT NOT NULL,
        referer TEXT,
        ua TEXT,
        status INTEGER,
        country TEXT,
        city TEXT,
        latitude REAL,
        longitude REAL
    )
    """
    index = (
        f"CREATE INDEX IF NOT EXISTS idx_{ANALYTICS_TABLE}_key "
        f"ON {ANALYTICS_TABLE} ({', '.join(KEY_COLUMNS)})"
    )
    with engine.begin() as conn:
        conn.execute(text(ddl))
        conn.execute(text(index))


def _to_frame(records: Iterable[Union[Record, dict]]) -> pd.DataFrame:
    rows = [asdict(r) if isinstance(r, Record) else dict(r) for r in records]
    return pd.DataFrame(rows, columns=RECORD_COLUMNS)


def write_records(path: Union[str, Path], records: Iterable[Union[Record, dict]]) -> int:
    df = _to_frame(records)
    if df.empty:
        return 0

    engine = get_engine(path)
    try:
        df.to_sql(ANALYTICS_TABLE, engine, if_exists='append', index=False)
    finally:
        engine.dispose()

    logger.debug(f"Wrote {len(df)} records to {Path(path).name}")
    return len(df)


def create_store(path: Union[str, Path], records: Iterable[Union[Record, dict]] = ()) -> Path:
    path = Path(path)
    engine = get_engine(path)
    try:
        ensure_schema(engine)
    finally:
        engine.dispose()
    write_records(path, records)
    return path


def read_records(path: Union[str, Path]) -> pd.DataFrame:
    engine = get_engine(path)
    try:
        with engine.connect() as conn:
            return pd.read_sql(
                text(f"SELECT id, {', '.join(RECORD_COLUMNS)} FROM {ANALYTICS_TABLE} ORDER BY id"),
                conn,
            )
    finally:
        engine.dispose()


def count_records(path: Union[str, Path]) -> int:
    engine = get_engine(path)
    try:
        with engine.connect() as conn:
            return int(conn.execute(text(f"SELECT COUNT(*) FROM {ANALYTICS_TABLE}")).scalar())
    finally:
        engine.dispose()
