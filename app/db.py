import os
from pathlib import Path
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import event
from sqlmodel import SQLModel, Session, create_engine

load_dotenv()

DB_PATH = Path(
    os.getenv("RESTAURANTE_DB", Path(__file__).resolve().parent.parent / "restaurante.db")
).resolve()

def _on_sqlite_connect(dbapi_conn, _conn_record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys = ON;")
    cur.execute("PRAGMA journal_mode = WAL;")
    cur.execute("PRAGMA synchronous = NORMAL;")
    cur.close()

def make_engine(url: str, **kwargs):
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        future=True,
        **kwargs,
    )
    # registra o hook no Engine síncrono
    event.listen(engine, "connect", _on_sqlite_connect)
    return engine

engine = make_engine(f"sqlite:///{DB_PATH}", pool_pre_ping=True)

def init_db(bind=None) -> None:
    from . import models  # registra tabelas
    SQLModel.metadata.create_all(bind or engine)

def get_session() -> Iterator[Session]:
    """Dependency do FastAPI: uma Session por requisição."""
    with Session(engine) as session:
        yield session
