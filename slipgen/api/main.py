import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slipgen.api import routes_auth, routes_generate, routes_slips
from slipgen.core.config import get_settings
from slipgen.core.logging import setup_logging

settings = get_settings()
setup_logging(logging.INFO)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.environment,
        "browser_mode": settings.browser_mode,
    }


app.include_router(routes_auth.router)
app.include_router(routes_slips.router)
app.include_router(routes_generate.router)
