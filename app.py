import logging
from typing import Optional

import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

import auth
import catalog
import review
import views
from auth import Identity, get_settings, require_admin, require_auth, require_reviewer
from config import STATIC_DIR, Settings, load_settings
from database import create_session_factory, get_db
from errors import register_error_handlers
from seed import init_db

logger = logging.getLogger(__name__)

router = APIRouter()


def get_templates(request: Request):
    return request.app.state.templates


# ---------------- Auth ----------------

@router.post("/auth/login")
def login(
    payload: dict = Body(default={}),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Check username and password; on success return the account details
    and set the session cookie.

    Payload:
        {"username": "...", "password": "..."}
    """
    user, token = auth.login(db, settings, payload.get("username"), payload.get("password"))
    response = JSONResponse(
        {
            "message": "Login successful",
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "created_at": auth.format_created_at(user.created_at),
            "token": token,
        }
    )
    auth.set_session_cookie(response, settings, token)
    return response


@router.post("/auth/logout")
def logout(settings: Settings = Depends(get_settings)):
    response = JSONResponse({"message": "Logout successful"})
    auth.clear_session_cookie(response, settings)
    return response


@router.get("/auth/status")
def auth_status(identity: Identity = Depends(require_auth)):
    return identity.to_dict()


@router.post("/auth/change-password")
def change_password(
    payload: dict = Body(default={}),
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Set a new password for the logged-in user and reissue the token.

    Payload:
        {"newPassword": "..."}
    """
    token = auth.change_password(db, settings, identity, payload.get("newPassword"))
    response = JSONResponse({"message": "Password updated successfully", "token": token})
    auth.set_session_cookie(response, settings, token)
    return response


@router.get("/test-session")
def test_session(request: Request, settings: Settings = Depends(get_settings)):
    """Show whether the session cookie is present and what it decodes to."""
    token = request.cookies.get(settings.cookie_name)
    return {
        "tokenPresent": bool(token),
        "decoded": auth.decode_claims(settings, token),
    }


# ---------------- Catalog API ----------------

@router.get("/api/products")
def list_products(db: Session = Depends(get_db)):
    return [product.to_dict() for product in catalog.list_products(db)]


@router.get("/api/products/search")
def search_products(q: Optional[str] = None, db: Session = Depends(get_db)):
    return [product.to_dict() for product in catalog.search_products(db, q)]


@router.delete("/api/products/{product_id}")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Public on purpose: anyone may delete a published product."""
    catalog.delete_product(db, settings, product_id)
    return {"message": "Product deleted successfully"}


# ---------------- Review queue API ----------------

@router.post("/api/products/pending", status_code=201)
@router.post("/api/products", status_code=201)
def submit_product(payload: dict = Body(default={}), db: Session = Depends(get_db)):
    """
    Queue a product for admin review. ``POST /api/products`` is kept as
    an alias for older clients and also only queues the product.

    Payload:
        {"name": "...", "description": "...", "price": 9.99}
    """
    pending = review.submit(
        db, payload.get("name"), payload.get("description"), payload.get("price")
    )
    return pending.to_dict()


@router.get("/api/pending-products")
def list_pending(
    identity: Identity = Depends(require_auth), db: Session = Depends(get_db)
):
    return [pending.to_dict() for pending in review.list_pending(db)]


@router.post("/api/pending-products/{pending_id}/approve")
def approve_pending(
    pending_id: int,
    identity: Identity = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    new_id = review.approve(db, pending_id)
    logger.info("Pending #%d approved by %s", pending_id, identity.username)
    return {"message": "Product approved", "newProductId": new_id}


@router.delete("/api/pending-products/{pending_id}")
def reject_pending(
    pending_id: int,
    identity: Identity = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    review.reject(db, pending_id)
    logger.info("Pending #%d rejected by %s", pending_id, identity.username)
    return {"message": "Pending product removed"}


# ---------------- Pages ----------------

@router.get("/")
def index(request: Request, db: Session = Depends(get_db)):
    """Storefront with server-rendered product cards."""
    return views.render_index(get_templates(request), request, catalog.list_products(db))


@router.get("/home-new.html")
def home_new(request: Request, search: str = "", db: Session = Depends(get_db)):
    """
    Storefront with a search box. The term is echoed back in the status
    banner and, when present, filters the product list.
    """
    if search:
        products = catalog.search_products(db, search)
    else:
        products = catalog.list_products(db)
    return views.render_search_page(get_templates(request), request, products, search)


@router.get("/login")
def login_page(request: Request):
    return views.render_login(get_templates(request), request)


@router.get("/dashboard")
def dashboard(request: Request, identity: Identity = Depends(require_auth)):
    return views.render_dashboard(get_templates(request), request, identity)


@router.get("/dashboard.html")
def dashboard_file():
    return PlainTextResponse("Access denied. Please login first.", status_code=403)


@router.get("/admin/queue")
def admin_queue(
    request: Request,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Review queue, rendered like the home page but from pending products."""
    return views.render_review_queue(get_templates(request), request, review.list_pending(db))


# ---------------- App factory ----------------

def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings = None) -> FastAPI:
    """
    Build the storefront application. Everything the routes need is kept
    on ``app.state``: the settings, the session factory and the templates.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="TechStore Lab")
    app.state.settings = settings
    app.state.session_factory = create_session_factory(settings.database_url)
    app.state.templates = views.build_templates(settings)

    init_db(app.state.session_factory, seed=settings.seed_on_startup)

    register_error_handlers(app)
    app.include_router(router)
    # Static files (CSS / JS)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    return app


def main() -> None:
    settings = load_settings()
    app = create_app(settings)
    logger.info("Server running on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
