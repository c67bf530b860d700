"""静态页面。"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from ...dependencies import SettingsDependency

router = APIRouter()


@router.get("/", include_in_schema=False)
async def index(settings: SettingsDependency) -> FileResponse:
    index_file = settings.static_dir / "index.html"
    if not index_file.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(index_file, media_type="text/html")
