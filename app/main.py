import logging
from contextlib import asynccontextmanager

import uvicorn

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from routers import worklogs, realtime
from utils.app_utils import work_log_store
from config import settings

PROD_MODE = settings.PRODUCTION_MODE

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(levelname)s - %(message)s',  # Log format
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The unique (company, employee, date, hour) index is what keeps upserts from duplicating
    await work_log_store.ensure_indexes()
    yield


app = FastAPI(title=settings.PROJECT_TITLE, lifespan=lifespan)

app.include_router(worklogs.router, prefix="/worklogs", tags=["worklogs"])
app.include_router(realtime.router, prefix="/realtime", tags=["realtime"])

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins = settings.cors_origins,
    allow_credentials = True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def index():
    return {"message": "Hello Strings"}


if __name__ == "__main__":
    if PROD_MODE == True:
    # Run Uvicorn without reload in production
        uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=False)

    else:
        # Run Uvicorn with reload=True in development mode
        uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=True)
