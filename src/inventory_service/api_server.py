#!/usr/bin/env python3
"""
FastAPI server for the inventory service.

Exposes item registration, lookup, update, deletion, search and photo
handling over HTTP, plus two small HTML forms for use from a browser.
"""
import html
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler as default_http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from .attachments import PHOTO_FIELD, Upload
from .blob_store import BlobStore
from .errors import BadRequestError, InventoryError, NotFoundError
from .repository import ItemRepository
from .schemas import ActionResult, HealthOut, ItemOut
from .service import InventoryService, SearchResult, field_text, is_flag_set

TEMPLATES_DIR = Path(__file__).parent / 'templates'

FORM_CONTENT_TYPES = ('multipart/form-data', 'application/x-www-form-urlencoded')

# Paths whose unmatched methods answer 405 rather than 404
METHOD_GUARDED_PATHS = ('/inventory', '/register')

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Inventory menu</title>
    <style>
        body { font-family: Arial, sans-serif; padding: 40px; max-width: 600px; margin: 0 auto; }
        h1 { color: #333; }
        ul { list-style-type: none; padding: 0; }
        li { margin: 15px 0; border: 1px solid #ddd; padding: 15px; border-radius: 8px; background: #f9f9f9; }
        a { text-decoration: none; color: #007BFF; font-weight: bold; font-size: 18px; display: block; }
        a:hover { color: #0056b3; }
    </style>
</head>
<body>
    <h1>📦 Inventory service</h1>
    <ul>
        <li><a href="/RegisterForm.html">📝 1. Register an item</a></li>
        <li><a href="/docs">📚 2. API documentation</a></li>
        <li><a href="/SearchForm.html">🔍 3. Find an item</a></li>
        <li><a href="/inventory">📋 4. All items (JSON)</a></li>
    </ul>
</body>
</html>
"""


router = APIRouter()


def get_service(request: Request) -> InventoryService:
    return request.app.state.inventory


async def read_body(request: Request) -> dict[str, Any]:
    """Read a form (urlencoded or multipart) or JSON object body into a dict.

    File parts are read into Upload values and the form is closed before returning.
    """
    content_type = request.headers.get('content-type', '')

    if content_type.startswith('application/json'):
        try:
            data = await request.json()
        except ValueError:
            raise BadRequestError("Malformed JSON body")
        if not isinstance(data, dict):
            raise BadRequestError("JSON body must be an object")
        return data

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        try:
            return {key: await read_form_value(key, form[key]) for key in form.keys()}
        finally:
            await form.close()

    return {}


async def read_form_value(key: str, value: Any) -> Any:
    """Copy a multipart file part into an Upload tagged with its field name."""
    if not isinstance(value, UploadFile):
        return value
    content = await value.read()
    return Upload(content=content, filename=value.filename, field_tag=key)


def upload_field(body: dict[str, Any]) -> Optional[Upload]:
    value = body.get(PHOTO_FIELD)
    return value if isinstance(value, Upload) else None


def wants_html(request: Request) -> bool:
    return 'text/html' in request.headers.get('accept', '')


def render_search_result(result: SearchResult) -> str:
    item = result.item
    page = f"""
        <div style="font-family: Arial; padding: 20px; border: 1px solid #ddd; max-width: 500px;">
            <h1>Search Result</h1>
            <p><strong>Name:</strong> {html.escape(item.name)}</p>
            <p><strong>Description:</strong> {html.escape(item.description)}</p>
            <p><strong>ID:</strong> {html.escape(item.id)}</p>
    """

    if result.photo_url:
        page += f"""
            <div style="margin-top: 15px;">
                <strong>Photo:</strong><br>
                <img src="{html.escape(result.photo_url)}" alt="Item Photo" style="max-width: 100%; border-radius: 8px; margin-top: 10px;">
            </div>
        """

    page += """
            <br><br>
            <a href="/SearchForm.html" style="text-decoration: none; color: blue;">&larr; Back to Search</a>
        </div>
    """
    return page


def render_search_miss(item_id: str) -> str:
    return f"""
        <div style="font-family: Arial; padding: 20px;">
            <h3 style="color: red;">Not Found</h3>
            <p>Item with ID <strong>{html.escape(item_id)}</strong> not found.</p>
            <a href="/SearchForm.html">Back to Search</a>
        </div>
    """


@router.api_route("/", methods=["GET", "HEAD"], response_class=HTMLResponse, summary="Menu page")
async def index():
    return INDEX_HTML


@router.api_route("/RegisterForm.html", methods=["GET", "HEAD"], response_class=FileResponse, summary="Item registration form")
async def register_form() -> FileResponse:
    return FileResponse(TEMPLATES_DIR / 'RegisterForm.html', media_type='text/html')


@router.api_route("/SearchForm.html", methods=["GET", "HEAD"], response_class=FileResponse, summary="Item search form")
async def search_form() -> FileResponse:
    return FileResponse(TEMPLATES_DIR / 'SearchForm.html', media_type='text/html')


@router.post("/register", status_code=201, response_model=ActionResult, summary="Register a new item")
async def register_item(request: Request, service: InventoryService = Depends(get_service)) -> ActionResult:
    """Create an item from `inventory_name` (or `name`), `description` and an optional `photo` file."""
    body = await read_body(request)
    name = field_text(body.get('inventory_name')) or field_text(body.get('name'))
    upload = upload_field(body)

    item = await run_in_threadpool(service.register, name, field_text(body.get('description')), upload)
    return ActionResult(message=f"Item created with ID: {item.id}", id=item.id)


@router.api_route("/inventory", methods=["GET", "HEAD"], response_model=list[ItemOut], summary="List all items")
async def list_items(service: InventoryService = Depends(get_service)) -> list[ItemOut]:
    return [ItemOut.from_item(item) for item in service.list()]


@router.api_route("/inventory/{item_id}", methods=["GET", "HEAD"], response_model=ItemOut, summary="Get one item by ID")
async def get_item(item_id: str, service: InventoryService = Depends(get_service)) -> ItemOut:
    return ItemOut.from_item(service.get_by_id(item_id))


@router.put("/inventory/{item_id}", response_model=ItemOut, summary="Update an item's name or description")
async def update_item(item_id: str, request: Request,
                      service: InventoryService = Depends(get_service)) -> ItemOut:
    """Empty or missing fields keep their current value."""
    body = await read_body(request)
    return ItemOut.from_item(service.update_metadata(item_id, body))


@router.delete("/inventory/{item_id}", response_model=ActionResult, summary="Delete an item")
async def delete_item(item_id: str, service: InventoryService = Depends(get_service)) -> ActionResult:
    await run_in_threadpool(service.delete, item_id)
    return ActionResult(message="Deleted", id=item_id)


@router.api_route("/inventory/{item_id}/photo", methods=["GET", "HEAD"], response_class=Response, summary="Get an item's photo")
async def get_photo(item_id: str, service: InventoryService = Depends(get_service)) -> Response:
    data = await run_in_threadpool(service.get_photo, item_id)
    return Response(content=data, media_type='image/jpeg')


@router.put("/inventory/{item_id}/photo", response_model=ActionResult, summary="Replace an item's photo")
async def replace_photo(item_id: str, request: Request,
                        service: InventoryService = Depends(get_service)) -> ActionResult:
    body = await read_body(request)
    upload = upload_field(body)
    await run_in_threadpool(service.replace_photo, item_id, upload)
    return ActionResult(message="Photo updated", id=item_id)


@router.post("/search", response_model=ItemOut, summary="Find an item by ID")
async def search_item(request: Request, service: InventoryService = Depends(get_service)):
    """Look up `id`; with `includePhoto` set, the description points at the photo."""
    body = await read_body(request)
    item_id = field_text(body.get('id')) or ''
    include_photo = body.get('includePhoto', body.get('include_photo'))

    try:
        result = service.search(item_id, include_photo=is_flag_set(include_photo))
    except NotFoundError:
        if wants_html(request):
            return HTMLResponse(render_search_miss(item_id), status_code=404)
        raise

    if wants_html(request):
        return HTMLResponse(render_search_result(result))
    return ItemOut.from_search(result)


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthOut, summary="Health check")
async def health(request: Request, service: InventoryService = Depends(get_service)) -> HealthOut:
    blob_names = await run_in_threadpool(service.blobs.names)
    return HealthOut(
        status="ok",
        item_count=len(service.repository),
        blob_count=len(blob_names),
        cache_dir=str(request.app.state.cache_dir),
    )


async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)


async def routing_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Unmatched routes: 405 under the inventory paths, 404 anywhere else."""
    if exc.status_code in (404, 405):
        if any(prefix in request.url.path for prefix in METHOD_GUARDED_PATHS):
            return PlainTextResponse("Method Not Allowed", status_code=405)
        return PlainTextResponse("Page Not Found", status_code=404)
    return await default_http_exception_handler(request, exc)


def create_app(cache_dir: Path) -> FastAPI:
    """Build the application around a blob directory that already exists."""
    cache_dir = Path(cache_dir)
    blobs = BlobStore(cache_dir)

    app = FastAPI(
        title="Inventory API",
        version="1.0.0",
        description="Register, find, update and delete inventory items and their photos.",
    )
    app.state.inventory = InventoryService(ItemRepository(), blobs)
    app.state.cache_dir = cache_dir

    # Enable CORS for browser clients on other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InventoryError, inventory_error_handler)
    app.add_exception_handler(StarletteHTTPException, routing_error_handler)
    app.include_router(router)
    return app
