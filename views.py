"""
Server-side HTML rendering.

Templates autoescape by default. Catalog text goes through the ``field``
filter, which leaves it raw in lab mode and escapes it when
``Settings.escape_html`` is on.
"""

from fastapi import Request
from fastapi.templating import Jinja2Templates
from markupsafe import Markup, escape

from config import TEMPLATES_DIR, Settings

REVIEW_QUEUE_BANNER = "Admin Review Queue: Approve or Reject pending submissions."


def build_templates(settings: Settings) -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    def field(value):
        if value is None:
            return ""
        if settings.escape_html:
            return escape(value)
        return Markup(str(value))

    templates.env.filters["field"] = field
    return templates


def render_search_page(
    templates: Jinja2Templates, request: Request, products, search_term: str
):
    """New home page; a non-empty ``search_term`` fills the status banner."""
    return templates.TemplateResponse(
        request,
        "home-new.html",
        {"products": products, "search_term": search_term},
    )


def render_dashboard(templates: Jinja2Templates, request: Request, identity):
    return templates.TemplateResponse(request, "dashboard.html", {"user": identity})


def render_login(templates: Jinja2Templates, request: Request):
    return templates.TemplateResponse(request, "login.html", {})


def render_index(templates: Jinja2Templates, request: Request, products):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"products": products, "review_queue": False},
    )


def render_review_queue(templates: Jinja2Templates, request: Request, pending):
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "products": pending,
            "review_queue": True,
            "banner": REVIEW_QUEUE_BANNER,
        },
    )
