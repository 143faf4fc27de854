import logging

import azure.functions as func

from mediafriend_recommendation_service.blueprints.library_bp import bp as library_bp
from mediafriend_recommendation_service.blueprints.recommendations_bp import bp as recommendations_bp
from mediafriend_recommendation_service.config import get_log_level

logging.getLogger().setLevel(get_log_level())

app = func.FunctionApp()

app.register_blueprint(recommendations_bp)
app.register_blueprint(library_bp)
