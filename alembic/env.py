import os
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import NullPool

from mietlink.models import Base

load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# read DB URL directly (don't pass through configparser)
db_url = os.environ.get("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL not set. Export it (or add in .env).")

# The app talks asyncpg; migrations run on the sync driver:
# postgresql+asyncpg://...  ->  postgresql://...
url = make_url(db_url)
if url.drivername in ("postgres", "postgresql+asyncpg"):
    url = url.set(drivername="postgresql")
sync_db_url = url.render_as_string(hide_password=False)

if url.get_backend_name() == "postgresql" and os.environ.get("DATABASE_SSL", "").lower() in ("1", "true", "yes"):
    if "sslmode" not in url.query:
        sync_db_url = make_url(sync_db_url).update_query_dict({"sslmode": "require"}).render_as_string(hide_password=False)


def run_migrations_offline():
    """Emit the migration SQL to stdout without a database connection."""
    context.configure(
        url=sync_db_url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    # No pooling, the pgbouncer in front of the database does that
    engine = create_engine(sync_db_url, poolclass=NullPool, future=True)

    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=Base.metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
