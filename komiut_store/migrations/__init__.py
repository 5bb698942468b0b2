"""Schema versioning for the on-device store.

Each schema version maps to one Alembic revision in ``versions/``. A store
file that has never been stamped is built directly at the newest version
with ``create_all``; any older store is upgraded step by step.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy.engine import Connection

from komiut_store import models  # noqa: F401
from komiut_store.database import Base

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

SCHEMA_REVISIONS: dict[int, str] = {
    1: "001_initial_schema",
    2: "002_add_wallet_points",
    3: "003_add_bus_routes_tables",
    4: "004_add_user_phone",
    5: "005_add_user_profile_image",
    6: "006_unique_wallet_per_user",
}
LATEST_VERSION = max(SCHEMA_REVISIONS)

_VERSIONS_BY_REVISION = {revision: version for version, revision in SCHEMA_REVISIONS.items()}


def alembic_config(connection: Connection) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.attributes["connection"] = connection
    return config


def current_version(connection: Connection) -> int | None:
    revision = MigrationContext.configure(connection).get_current_revision()
    if revision is None:
        return None
    return _VERSIONS_BY_REVISION[revision]


def migrate(connection: Connection, version: int = LATEST_VERSION) -> int | None:
    """Bring the schema to ``version``. Returns the version found on disk."""
    if version not in SCHEMA_REVISIONS:
        raise ValueError(f"Unknown schema version {version}")

    found = current_version(connection)
    config = alembic_config(connection)

    if found == version:
        logger.debug("Schema already at version %s", version)
    elif found is None and version == LATEST_VERSION:
        logger.info("Creating fresh schema at version %s", version)
        Base.metadata.create_all(connection)
        command.stamp(config, SCHEMA_REVISIONS[version])
    else:
        logger.info("Migrating schema from version %s to %s", found, version)
        command.upgrade(config, SCHEMA_REVISIONS[version])

    return found
