import mimetypes
from pathlib import Path
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import FileResponse, PlainTextResponse

from app.core.config import settings

router = APIRouter()

INDEX_ALIASES = {"", "index"}


def resolve_static_path(root: Path, url_path: str) -> Optional[Path]:
    """
    Maps a URL path onto a file under root.
    Returns None when the result would escape the root directory.
    """
    relative = url_path.strip("/")
    if relative in INDEX_ALIASES:
        relative = "index.html"

    root = root.resolve()
    target = (root / relative).resolve()
    if target != root and root not in target.parents:
        return None
    return target


@router.api_route("/{path:path}", methods=["GET", "HEAD"], include_in_schema=False)
async def serve_static(path: str):
    target = resolve_static_path(Path(settings.STATIC_DIR), path)
    if target is None:
        return PlainTextResponse("Access denied", status_code=403)
    if not target.is_file():
        return PlainTextResponse("File not found", status_code=404)

    media_type, _ = mimetypes.guess_type(target.name)
    return FileResponse(target, media_type=media_type or "application/octet-stream")
