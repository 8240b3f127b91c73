# ==============================================================================
# RUTAS HTTP
# ==============================================================================

from . import orders, sales


def register_blueprints(app):
    app.register_blueprint(sales.bp)
    app.register_blueprint(orders.bp)
