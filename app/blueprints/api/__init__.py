from flask import Blueprint

# Mounted at API_PREFIX by create_app()
bp = Blueprint("api", __name__)

# Import route modules so their @bp.route decorators run
from . import errors      # noqa: E402,F401  JSON error mapping for ServiceError
from . import health      # noqa: E402,F401  /health
from . import sessions    # noqa: E402,F401  /feedback, /session/<id>, /session/<id>/message
from . import community   # noqa: E402,F401  /community, /community/<id>/upvote
from . import admin       # noqa: E402,F401  /admin/dashboard, /admin/feedback/<id>/status
from . import progress    # noqa: E402,F401  /progress
