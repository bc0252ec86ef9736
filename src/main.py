import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from api.api_v1.api import api_router
from core.config import settings
from core.db import init_db
from core.exceptions import VaultError
from log import setup_logging

app = FastAPI(
    title=settings.PROJECT_NAME, openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    init_db()


@app.exception_handler(VaultError)
async def vault_exception_handler(request: Request, exc: VaultError):
    return JSONResponse(
        status_code=400,
        content={
            "error": type(exc).__name__,
            "detail": str(exc),
        },
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    setup_logging("vault_api", to_file=settings.is_production)
    uvicorn.run(app, host="0.0.0.0", port=8001)
