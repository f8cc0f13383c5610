import os
from pathlib import Path

from fastapi import BackgroundTasks, Depends, FastAPI, Form, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from loguru import logger
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from .db import get_session, init_db
from .logging_setup import setup_logging
from .schemas import ErrorList, LinkCreateRequest, LinkEnvelope, LinkList, LinkOut
from .services import links as link_service
from .services.links import LinkNotFound, LinkValidationError
from .services.notify import Notifier, get_notifier
from .services.scoring import formatted_score_for


BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"


def notify_new_link(notifier: Notifier, link) -> None:
    try:
        notifier.new_link(link)
    except Exception:
        logger.exception("Moderator notification for link {} failed", link.id)


def validation_message(err: dict) -> str:
    """Turn one pydantic error into a message like ``"Url is invalid: ..."``."""
    names = [part for part in err.get("loc", ()) if isinstance(part, str) and part != "body"]
    label = (names[-1] if names else "body").capitalize()
    if err.get("type") == "missing":
        return f"{label} can't be blank"
    return f"{label} is invalid: {err.get('msg', 'bad value')}"


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Reddat", version="0.1.0")

    secret_key = os.getenv("REDDAT_SECRET_KEY", "dev-secret-change-me")
    app.add_middleware(SessionMiddleware, secret_key=secret_key)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["formatted_score"] = formatted_score_for

    @app.on_event("startup")
    async def _startup() -> None:
        init_db()

    @app.exception_handler(LinkNotFound)
    async def _link_not_found(request: Request, exc: LinkNotFound):
        if request.url.path.startswith("/api/"):
            return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_404_NOT_FOUND)
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"message": str(exc)},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError):
        if not request.url.path.startswith("/api/"):
            return await request_validation_exception_handler(request, exc)
        return JSONResponse(
            ErrorList(errors=[validation_message(err) for err in exc.errors()]).model_dump(),
            status_code=422,
        )

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request, db: Session = Depends(get_session)):
        sort = request.query_params.get("sort", "hot")
        if sort == "new":
            items = link_service.newest_first(db)
        else:
            sort = "hot"
            items = link_service.hottest_first(db)
        notice = request.session.pop("notice", None)
        return templates.TemplateResponse(
            request,
            "index.html",
            {"links": items, "sort": sort, "notice": notice},
        )

    @app.get("/links/new", response_class=HTMLResponse)
    async def new_link(request: Request):
        return templates.TemplateResponse(
            request,
            "new_link.html",
            {"title": "", "url": "", "errors": []},
        )

    @app.post("/links")
    async def create_link(
        request: Request,
        background_tasks: BackgroundTasks,
        title: str = Form(""),
        url: str = Form(""),
        db: Session = Depends(get_session),
        notifier: Notifier = Depends(get_notifier),
    ):
        try:
            link = link_service.create_link(db, title, url)
        except LinkValidationError as e:
            return templates.TemplateResponse(
                request,
                "new_link.html",
                {"title": title, "url": url, "errors": e.errors},
                status_code=422,
            )
        background_tasks.add_task(notify_new_link, notifier, link)
        request.session["notice"] = "Link submitted."
        return RedirectResponse(url=f"/links/{link.id}", status_code=302)

    @app.get("/links/{link_id}", response_class=HTMLResponse)
    async def show_link(request: Request, link_id: int, db: Session = Depends(get_session)):
        link = link_service.get_link(db, link_id)
        notice = request.session.pop("notice", None)
        return templates.TemplateResponse(
            request,
            "show_link.html",
            {"link": link, "notice": notice},
        )

    @app.post("/links/{link_id}/upvote")
    async def upvote(request: Request, link_id: int, db: Session = Depends(get_session)):
        link_service.upvote(db, link_id)
        referer = request.headers.get("referer") or "/"
        return RedirectResponse(url=referer, status_code=302)

    @app.post("/links/{link_id}/downvote")
    async def downvote(request: Request, link_id: int, db: Session = Depends(get_session)):
        link_service.downvote(db, link_id)
        referer = request.headers.get("referer") or "/"
        return RedirectResponse(url=referer, status_code=302)

    # --- JSON API ---
    @app.get("/api/v1/links", response_model=LinkList)
    async def api_links(db: Session = Depends(get_session)):
        return LinkList(links=[LinkOut.model_validate(link) for link in link_service.hottest_first(db)])

    @app.get("/api/v1/links/{link_id}", response_model=LinkEnvelope)
    async def api_link(link_id: int, db: Session = Depends(get_session)):
        return LinkEnvelope(link=LinkOut.model_validate(link_service.get_link(db, link_id)))

    @app.post(
        "/api/v1/links",
        response_model=LinkEnvelope,
        status_code=status.HTTP_201_CREATED,
        responses={422: {"model": ErrorList}},
    )
    async def api_create_link(
        payload: LinkCreateRequest,
        background_tasks: BackgroundTasks,
        db: Session = Depends(get_session),
        notifier: Notifier = Depends(get_notifier),
    ):
        try:
            link = link_service.create_link(db, payload.link.title, payload.link.url)
        except LinkValidationError as e:
            return JSONResponse(
                ErrorList(errors=e.errors).model_dump(),
                status_code=422,
            )
        background_tasks.add_task(notify_new_link, notifier, link)
        return LinkEnvelope(link=LinkOut.model_validate(link))

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


app = create_app()
