from alembic import context

from komiut_store import models  # noqa: F401
from komiut_store.database import Base

target_metadata = Base.metadata


def run_migrations_online() -> None:
    # The store hands over its own open connection; there is no ini file.
    connection = context.config.attributes["connection"]
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


run_migrations_online()
