from flask import Flask

from smartmarks.api import api_bp
from smartmarks.auth import auth_bp
from smartmarks.config import Config
from smartmarks.extensions import db, login_manager, migrate
from smartmarks.jobs.scheduler import start_scheduler
from smartmarks.services.presentation import register_template_filters
from smartmarks.web import web_bp


def create_app(config_object=Config):
    app = Flask(__name__, template_folder="../templates", static_folder="../static")
    app.config.from_object(config_object)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp)
    register_template_filters(app)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        print("Initialized Smartmarks database.")

    @app.context_processor
    def inject_globals():
        return {"app_name": "Smart Bookmarks"}

    with app.app_context():
        db.create_all()

    start_scheduler(app)
    return app
