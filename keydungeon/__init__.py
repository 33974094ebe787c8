"""
project: KeyDungeon
module: __init__.py
License: MIT

Flask application factory.

The generator itself lives in ``keydungeon.dungeon`` and has no web
dependency at call time; this module only wires the HTTP blueprint that
serves generated dungeons as JSON. Configuration is sourced from environment
variables (optionally from a ``.env`` file) with development defaults.
"""

import os

from dotenv import load_dotenv
from flask import Flask

__version__ = "0.1.0"

# Load .env if present so KEYDUNGEON_* settings can be supplied without exporting shell variables.
load_dotenv()


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.update(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        KEYDUNGEON_DISABLE_CACHE=os.getenv("KEYDUNGEON_DISABLE_CACHE", "0") == "1",
        KEYDUNGEON_CACHE_MAX=int(os.getenv("KEYDUNGEON_CACHE_MAX", "8")),
    )
    if config_overrides:
        app.config.update(config_overrides)

    # Register HTTP blueprints
    from keydungeon.routes.dungeon_api import bp_dungeon

    app.register_blueprint(bp_dungeon)
    return app
