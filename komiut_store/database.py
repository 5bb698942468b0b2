from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Session

from komiut_store.config import Settings


class Base(DeclarativeBase):
    pass


class TrackingSession(Session):
    """Session that remembers which tables it has written to.

    Rows written through the unit of work are picked up after each flush,
    bulk INSERT/UPDATE/DELETE statements when they are executed.
    """

    @property
    def written_tables(self) -> set[str]:
        return self.info.setdefault("written_tables", set())

    @property
    def deleted_from_tables(self) -> set[str]:
        return self.info.setdefault("deleted_from_tables", set())


@event.listens_for(TrackingSession, "after_flush")
def _record_flushed_tables(session: TrackingSession, flush_context) -> None:
    # new/dirty/deleted still hold the pre-flush state here
    for obj in (*session.new, *session.dirty):
        session.written_tables.add(obj.__table__.name)
    for obj in session.deleted:
        session.written_tables.add(obj.__table__.name)
        session.deleted_from_tables.add(obj.__table__.name)


@event.listens_for(TrackingSession, "do_orm_execute")
def _record_statement_tables(orm_execute_state) -> None:
    if not (
        orm_execute_state.is_insert
        or orm_execute_state.is_update
        or orm_execute_state.is_delete
    ):
        return
    session = orm_execute_state.session
    table_name = orm_execute_state.statement.table.name
    session.written_tables.add(table_name)
    if orm_execute_state.is_delete:
        session.deleted_from_tables.add(table_name)


def cascade_tables(deleted_from: set[str]) -> set[str]:
    """Tables whose rows the database removes by ON DELETE CASCADE."""
    affected: set[str] = set()
    pending = set(deleted_from)
    while pending:
        parent = pending.pop()
        for table in Base.metadata.sorted_tables:
            if table.name in affected:
                continue
            for fk in table.foreign_keys:
                if fk.column.table.name == parent and (fk.ondelete or "").upper() == "CASCADE":
                    affected.add(table.name)
                    pending.add(table.name)
                    break
    return affected


def build_engine(settings: Settings) -> AsyncEngine:
    engine = create_async_engine(settings.database_url, echo=settings.sql_echo)

    @event.listens_for(engine.sync_engine, "connect")
    def _configure_sqlite(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA journal_mode={settings.sqlite_journal_mode}")
        cursor.execute(f"PRAGMA busy_timeout={int(settings.sqlite_busy_timeout_ms)}")
        cursor.close()

    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        autoflush=False,
        sync_session_class=TrackingSession,
    )
