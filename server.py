#!/usr/bin/env python3
"""
ScriptNarrator FastAPI Server

A job-based text-to-audio server backed by Microsoft Edge read-aloud voices.
Long scripts are split into segments, narrated one at a time and joined into
a single MP3 that clients poll for and download.
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from narrator.config import (
    APP_NAME,
    APP_VERSION,
    ARTIFACT_DIR,
    CORS_ORIGINS,
    FILES_URL_PREFIX,
    FRONTEND_DIR,
    JOB_TTL,
    SERVER_HOST,
    SERVER_PORT,
    SWEEP_INTERVAL_SECONDS,
    ensure_directories,
)
from narrator.services.job_processor import get_job_processor
from narrator.static import FrontendStaticFiles
from narrator.services.job_store import get_reclaimer
from narrator.routers import health_router, voices_router, jobs_router, files_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup:
        - Create the artifact directory
        - Start the reclaimer

    Shutdown:
        - Stop the reclaimer
        - Let in-flight jobs finish, cancelling stragglers
    """
    print(f'Starting {APP_NAME} v{APP_VERSION}...')

    ensure_directories()
    print(f'Serving audio from {ARTIFACT_DIR}')

    print(f'Starting reclaimer (every {SWEEP_INTERVAL_SECONDS // 60} min, ttl {JOB_TTL})...')
    reclaimer = get_reclaimer()
    await reclaimer.start()

    print(f'Server ready at http://{SERVER_HOST}:{SERVER_PORT}')
    print('API documentation available at /docs')

    yield

    print('Shutting down...')
    await reclaimer.stop()
    await get_job_processor().stop()
    print('Shutdown complete.')


# Create FastAPI application
app = FastAPI(
    title=APP_NAME,
    description='A job-based text-to-audio server using Edge read-aloud voices.',
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=['*'],
    allow_headers=['*'],
)

# Register routers
app.include_router(health_router)
app.include_router(voices_router)
app.include_router(jobs_router)
app.include_router(files_router)

# Generated audio and previews
ensure_directories()
app.mount(FILES_URL_PREFIX, StaticFiles(directory=str(ARTIFACT_DIR)), name='files')

# Built frontend, when present; must be mounted last
if FRONTEND_DIR.exists():
    app.mount('/', FrontendStaticFiles(directory=str(FRONTEND_DIR)), name='frontend')
else:
    print(f'Frontend build folder not found at {FRONTEND_DIR}; serving the API only.')


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    uvicorn.run(
        app,
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=False,
        log_level='info',
    )
