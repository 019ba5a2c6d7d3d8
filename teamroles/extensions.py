from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect
from sqlalchemy import MetaData

# blob_entries only needs a stable primary-key name for migrations
db = SQLAlchemy(metadata=MetaData(naming_convention={"pk": "pk_%(table_name)s"}))
migrate = Migrate()
csrf = CSRFProtect()

# app.extensions key for the process-wide ConfigurationStore
CONFIGURATION_STORE_KEY = "teamroles.configurations"


def init_extensions(app: Flask) -> None:
    """Bind db/migrate/csrf to ``app`` and create the blob table."""
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    with app.app_context():
        from . import models  # noqa: F401  (register tables)
        db.create_all()
