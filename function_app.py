import azure.functions as func

from asian_drama_board.blueprints import dramas_bp, interactions_bp, pages_bp
from asian_drama_board.models.database import init_db

init_db()

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

app.register_blueprint(pages_bp)
app.register_blueprint(dramas_bp)
app.register_blueprint(interactions_bp)
