"""
Web 진입점

실행 방법:
    python -m web
"""

import uvicorn

from core.config.loader import get_settings
from core.logging import setup_logging
from web.app import create_app

if __name__ == "__main__":
    # 로깅 설정 (콘솔 + 파일)
    setup_logging("api")

    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.web.host,
        port=settings.web.port,
        reload=False,
        log_config=None,
    )
