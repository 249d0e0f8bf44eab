from .api import api
from .pages import pages


def register_blueprints(app):
    app.register_blueprint(pages)
    app.register_blueprint(api, url_prefix='/api')
