from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx
from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from pypdf.errors import PdfReadError
from starlette.concurrency import run_in_threadpool

from pdfchat.chat import ChatService
from pdfchat.chunking.chunker import PDFChunker
from pdfchat.ingest.pdf_loader import extract_document
from pdfchat.llm.ollama import ollama_reachable
from pdfchat.logging_setup import configure_logging
from pdfchat.retrieval.index import to_dict
from pdfchat.session import DocumentStore, document_id_for
from pdfchat.settings import settings

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


def _extract(path):
    return extract_document(
        path,
        ocr_enabled=settings.ocr_enabled,
        ocr_lang=settings.ocr_lang,
        ocr_dpi=settings.ocr_dpi,
        title_max_chars=settings.title_max_chars,
    )


def create_app(store: DocumentStore | None = None, chat: ChatService | None = None) -> FastAPI:
    app = FastAPI(title="pdfchat API", version="0.1.0")

    app.state.store = store or DocumentStore(
        chunker=PDFChunker(settings.chunk_options()),
        extractor=_extract,
    )
    app.state.chat = chat or ChatService(
        app.state.store,
        ollama_url=settings.ollama_url,
        model=settings.ollama_llm_model,
        temperature=settings.llm_temperature,
        timeout_s=settings.llm_timeout_s,
    )

    app.include_router(router)
    return app


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_chat(request: Request) -> ChatService:
    return request.app.state.chat


router = APIRouter()


@router.get("/healthz")
async def healthz():
    """
    Reports whether the LLM backend answers. The retrieval core has no
    external dependencies, so the API itself is always usable.
    """
    ollama_ok = await ollama_reachable(settings.ollama_url)
    return {
        "status": "ok" if ollama_ok else "degraded",
        "ollama_ok": ollama_ok,
        "env": settings.app_env,
    }


@router.post("/pdf/process")
async def pdf_process(
    path: str = Body(..., embed=True),
    reprocess: bool = Body(False, embed=True),
    store: DocumentStore = Depends(get_store),
):
    """
    Extract, chunk and index a PDF. Cached until closed.
    """
    open_fn = store.reprocess if reprocess else store.open_document
    try:
        result = await run_in_threadpool(open_fn, path)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PdfReadError as e:
        logger.warning("Could not read PDF %s: %s", path, e)
        raise HTTPException(status_code=422, detail=f"Could not read PDF: {e}")

    return {
        "success": True,
        "document_id": document_id_for(path),
        "page_count": result.page_count,
        "title": result.title,
        "chunks": len(result.chunks),
        "ocr_pages": result.ocr_pages,
    }


@router.get("/pdf/page-text")
async def pdf_page_text(
    path: str = Query(...),
    page: int = Query(..., ge=1),
    store: DocumentStore = Depends(get_store),
):
    try:
        text = await run_in_threadpool(store.get_page_text, path, page)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PdfReadError as e:
        raise HTTPException(status_code=422, detail=f"Could not read PDF: {e}")
    return {"page": page, "text": text}


@router.post("/pdf/close")
async def pdf_close(
    path: str | None = Body(None, embed=True),
    store: DocumentStore = Depends(get_store),
):
    if path is None:
        store.close_all()
    else:
        store.close_document(path)
    return {"closed": path or "all"}


@router.post("/search")
async def search(
    path: str = Body(..., embed=True),
    query: str = Body(..., embed=True),
    k: int = Body(settings.search_top_k, embed=True, ge=1, le=50),
    store: DocumentStore = Depends(get_store),
):
    """
    Debug endpoint: ranked chunks with their BM25 scores.
    """
    hits = await run_in_threadpool(store.retrieve_with_scores, path, query, k)
    return {
        "document_id": document_id_for(path),
        "query": query,
        "hits": [to_dict(h) for h in hits],
    }


@router.post("/chat/send")
async def chat_send(
    path: str = Body(..., embed=True),
    message: str = Body(..., embed=True, min_length=1),
    conversation_id: str = Body(..., embed=True, min_length=1),
    k: int = Body(settings.search_top_k, embed=True, ge=1, le=50),
    chat: ChatService = Depends(get_chat),
):
    async def body() -> AsyncIterator[str]:
        try:
            async for piece in chat.stream_answer(path, message, conversation_id, top_k=k):
                yield piece
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Chat %s failed: %s", conversation_id, e)
            yield f"\n[error] LLM request failed: {e}"

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")


@router.post("/chat/ask")
async def chat_ask(
    path: str = Body(..., embed=True),
    message: str = Body(..., embed=True, min_length=1),
    k: int = Body(settings.search_top_k, embed=True, ge=1, le=50),
    chat: ChatService = Depends(get_chat),
):
    """
    Non-streaming chat: the whole answer plus the pages it drew on.
    """
    try:
        answer, chunks = await chat.answer(path, message, top_k=k)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Ask failed: %s", e)
        raise HTTPException(status_code=502, detail=f"LLM request failed: {e}")
    return {"answer": answer, "pages": sorted({c.page_number for c in chunks})}


@router.post("/chat/abort")
async def chat_abort(
    conversation_id: str = Body(..., embed=True),
    chat: ChatService = Depends(get_chat),
):
    return {"aborted": chat.abort(conversation_id)}


app = create_app()
