from app.extensions import limiter
from . import bp


@bp.get("/health")
@limiter.exempt
def health():
    return {"status": "ok"}, 200
