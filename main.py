# main.py
import json
import uuid
from time import time

import firebase_admin
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from firebase_admin import credentials

from config import settings
from app.scripts.logging_config import setup_logging, get_logger, set_request_id

# 1) logging first
# set LOG_JSON=true for JSON lines in production
setup_logging(json_fmt=settings.LOG_JSON, log_dir=settings.LOG_DIR)
logger = get_logger(__name__)

# 2) Firebase
cred_obj = None

try:
    if settings.FIREBASE_CREDENTIALS_JSON_STRING:
        cred_obj = credentials.Certificate(json.loads(settings.FIREBASE_CREDENTIALS_JSON_STRING))
        logger.info("Firebase credentials loaded from FIREBASE_CREDENTIALS_JSON_STRING.")
    elif settings.GOOGLE_APPLICATION_CREDENTIALS:
        cred_obj = credentials.Certificate(settings.GOOGLE_APPLICATION_CREDENTIALS)
        logger.info("Firebase credentials loaded from GOOGLE_APPLICATION_CREDENTIALS file.")

    if cred_obj:
        if not firebase_admin._apps:
            firebase_admin.initialize_app(cred_obj)
        logger.info("Firebase initialized successfully.")
    else:
        logger.warning("Firebase credentials not found. Search will fail until Firestore is reachable.")
except Exception as e:
    logger.exception("Firebase initialization failed: %s", e)

# 3) FastAPI app
app = FastAPI(title="Store Item Discovery API")

# 4) request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    set_request_id(rid)

    start = time()
    path = request.url.path
    method = request.method
    query = request.url.query
    client_ip = getattr(request.client, 'host', '-') if request.client else '-'
    ua = request.headers.get('user-agent', '')[:120]

    if query:
        logger.info("REQ start %s %s?%s ip=%s ua=%r", method, path, query, client_ip, ua)
    else:
        logger.info("REQ start %s %s ip=%s ua=%r", method, path, client_ip, ua)

    status = 'NA'
    try:
        response = await call_next(request)
        status = response.status_code
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        duration = (time() - start) * 1000
        logger.info("REQ end %s %s status=%s %.1fms", method, path, status, duration)

# 5) CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)
logger.info("CORS middleware configured for %s", settings.cors_allowed_origins)

# 6) routers
from app.api import search

app.include_router(search.router)

# 7) endpoints
@app.get("/")
def root():
    return {"message": "Store item discovery backend", "routes": [
        "/search",
        "/stores/{store_id}/items",
    ]}
