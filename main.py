from fastapi import FastAPI, Request, UploadFile, File, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
from pydantic import BaseModel
import asyncio
import os
import logging
from typing import Dict
from dotenv import load_dotenv
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from md_pdf import MalformedDocumentError, RenderSettings, render

# Load environment variables
load_dotenv()

# Rate limiting & concurrency config (env-configurable)
RATE_LIMIT = os.getenv("RATE_LIMIT", "100/15minutes")
GLOBAL_RATE_LIMIT = os.getenv("GLOBAL_RATE_LIMIT", "200/minute")
MAX_CONCURRENT_PER_IP = int(os.getenv("MAX_CONCURRENT_PER_IP", "3"))
MAX_CONCURRENT_GLOBAL = int(os.getenv("MAX_CONCURRENT_GLOBAL", "6"))

DEFAULT_ALLOWED_ORIGINS = "https://yourcollegecontact.com,http://localhost:3000"
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS).split(",")
    if origin.strip()
]

RENDER_SETTINGS = RenderSettings.from_env()


# --- Client IP extraction (Cloudflare-aware) ---
def get_client_ip(request: Request) -> str:
    for header in ("x-original-client-ip", "cf-connecting-ip", "x-forwarded-for", "x-real-ip"):
        val = request.headers.get(header)
        if val:
            return val.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


# --- SlowAPI rate limiter ---
limiter = Limiter(key_func=get_client_ip)


# --- Concurrency controls ---
_active_queries: Dict[str, int] = {}
_active_global: int = 0
_concurrency_lock = asyncio.Lock()


async def check_concurrency(client_ip: str):
    global _active_global
    async with _concurrency_lock:
        if _active_global >= MAX_CONCURRENT_GLOBAL:
            raise HTTPException(status_code=503, detail="Server busy.")
        ip_count = _active_queries.get(client_ip, 0)
        if ip_count >= MAX_CONCURRENT_PER_IP:
            raise HTTPException(status_code=429, detail="Too many concurrent requests.")
        _active_queries[client_ip] = ip_count + 1
        _active_global += 1


async def _release_concurrency_inner(client_ip: str):
    global _active_global
    async with _concurrency_lock:
        _active_queries[client_ip] = max(0, _active_queries.get(client_ip, 1) - 1)
        if _active_queries[client_ip] == 0:
            _active_queries.pop(client_ip, None)
        _active_global = max(0, _active_global - 1)


async def release_concurrency(client_ip: str):
    try:
        await asyncio.shield(_release_concurrency_inner(client_ip))
    except asyncio.CancelledError:
        pass


# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Markdown Export Service")

# SlowAPI rate limiter registration
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware; Content-Disposition must be visible to browsers for downloads
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Content-Disposition"],
    expose_headers=["Content-Disposition"],
    max_age=86400,
)


@app.exception_handler(MalformedDocumentError)
async def malformed_document_handler(request: Request, exc: MalformedDocumentError):
    logger.warning(f"Rejected malformed markdown on {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# Global exception handler — safety net for unhandled errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health():
    return {"status": "ok"}


class MarkdownText(BaseModel):
    content: str
    filename: str = "document.pdf"


def pdf_filename(name: str) -> str:
    """Reduce a client-supplied name to a safe ``.pdf`` download name."""
    base = os.path.basename((name or "").replace("\\", "/")).strip()
    stem = os.path.splitext(base)[0].replace('"', "")
    return f"{stem or 'document'}.pdf"


async def _process_markdown_to_pdf_response(markdown_content: str, output_filename: str):
    """
    Render markdown and wrap the PDF in a streaming download response.

    Rendering is synchronous and CPU-bound, so it runs in the threadpool;
    the finished document is then streamed from memory.
    """
    logger.info(f"Processing markdown content: {len(markdown_content)} characters")
    document = await run_in_threadpool(render, markdown_content, RENDER_SETTINGS)
    logger.info(f"Created PDF {output_filename}: {document.page_count} pages")

    return StreamingResponse(
        document.iter_chunks(),
        media_type='application/pdf',
        headers={"Content-Disposition": f'attachment; filename="{output_filename}"'},
    )


@app.post("/api/convert")
@limiter.limit(RATE_LIMIT)
@limiter.shared_limit(GLOBAL_RATE_LIMIT, scope="global", key_func=lambda *args, **kwargs: "global")
async def convert_markdown(request: Request, file: UploadFile = File(...)):
    """
    Convert uploaded markdown file to PDF.
    """
    client_ip = get_client_ip(request)
    await check_concurrency(client_ip)
    try:
        content = await file.read()
        try:
            md_content = content.decode('utf-8')
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="Markdown file must be UTF-8 encoded")
        output_filename = pdf_filename(file.filename)
        return await _process_markdown_to_pdf_response(md_content, output_filename)
    except (HTTPException, MalformedDocumentError):
        raise
    except Exception as e:
        logger.error(f"Error processing uploaded file: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    finally:
        await release_concurrency(client_ip)


@app.post("/api/convert/text")
@limiter.limit(RATE_LIMIT)
@limiter.shared_limit(GLOBAL_RATE_LIMIT, scope="global", key_func=lambda *args, **kwargs: "global")
async def convert_markdown_text_endpoint(request: Request, data: MarkdownText):
    """Convert markdown text directly to PDF."""
    client_ip = get_client_ip(request)
    await check_concurrency(client_ip)
    try:
        output_filename = pdf_filename(data.filename)
        return await _process_markdown_to_pdf_response(data.content, output_filename)
    except (HTTPException, MalformedDocumentError):
        raise
    except Exception as e:
        logger.error(f"Error processing markdown text: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    finally:
        await release_concurrency(client_ip)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
