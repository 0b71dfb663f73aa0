"""文件下载路由"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ..errors import StorageError
from ..utils.file_storage import FileStorage
from ..utils.helpers import content_type_for
from .deps import get_storage

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/media/{filename}")
def get_media_file(filename: str, storage: FileStorage = Depends(get_storage)):
    """按扩展名推断 Content-Type 返回媒体文件"""
    path = storage.path_for("media", filename)
    if not storage.exists(path):
        raise StorageError("File not found", status_code=404)
    return FileResponse(path, media_type=content_type_for(path.name))
