"""python -m millpoint 启动开发服务器"""

import uvicorn

from .config.settings import settings


def main() -> None:
    uvicorn.run("millpoint.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.is_development)


if __name__ == "__main__":
    main()
