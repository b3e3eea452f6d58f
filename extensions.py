from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Extensions are created unbound and attached in create_app()
db = SQLAlchemy()
migrate = Migrate()
