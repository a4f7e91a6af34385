import logging
import logging.config

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from skeleton_coach.api.api_router import router
from skeleton_coach.core.config import settings
from skeleton_coach.helpers.exception_handler import CustomException, http_exception_handler

logging.config.fileConfig(settings.LOGGING_CONFIG_FILE, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


def get_application() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME, docs_url="/docs", redoc_url='/re-docs',
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        description='''
        Guided exercise coaching on tracked skeletons
            - Sessions with arms-cross / hands-on-head / hands-down cycle
            - Per-frame classification over REST or WebSocket
            - Adjustable tolerance
        '''
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(router, prefix=settings.API_PREFIX)
    application.add_exception_handler(CustomException, http_exception_handler)

    for route in application.routes:
        methods = getattr(route, 'methods', None)
        logger.debug(f"Route: {getattr(route, 'path', route)} {methods}")

    return application


app = get_application()
if __name__ == '__main__':
    uvicorn.run(app, host="0.0.0.0", port=8000)
