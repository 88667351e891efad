from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing

from pdfchat.chunking.models import Chunk
from pdfchat.llm.ollama import generate_ollama, stream_ollama
from pdfchat.rag.prompting import build_context, build_rag_prompt, build_system_prompt
from pdfchat.retrieval.index import DEFAULT_TOP_K
from pdfchat.session import DocumentStore

logger = logging.getLogger(__name__)

StreamFn = Callable[..., AsyncIterator[str]]
GenerateFn = Callable[..., Awaitable[str]]


class ChatService:
    """
    Answers questions about an open document by streaming an LLM completion
    grounded in the document's top-ranked chunks.
    """

    def __init__(
        self,
        store: DocumentStore,
        ollama_url: str,
        model: str,
        temperature: float = 0.2,
        timeout_s: float = 120.0,
        stream_fn: StreamFn = stream_ollama,
        generate_fn: GenerateFn = generate_ollama,
    ):
        self.store = store
        self.ollama_url = ollama_url
        self.model = model
        self.temperature = temperature
        self.timeout_s = timeout_s
        self._stream_fn = stream_fn
        self._generate_fn = generate_fn
        self._active: dict[str, asyncio.Event] = {}

    async def stream_answer(
        self,
        path: str,
        message: str,
        conversation_id: str,
        top_k: int = DEFAULT_TOP_K,
    ) -> AsyncIterator[str]:
        cancelled = asyncio.Event()
        self._active[conversation_id] = cancelled

        try:
            chunks = self.store.retrieve(path, message, top_k)
            logger.info(
                "Chat %s: retrieved %d chunks (pages=%s)",
                conversation_id,
                len(chunks),
                sorted({c.page_number for c in chunks}),
            )
            system = build_system_prompt(build_context(chunks))

            stream = self._stream_fn(
                ollama_url=self.ollama_url,
                model=self.model,
                prompt=message,
                system=system,
                temperature=self.temperature,
                timeout_s=self.timeout_s,
            )
            async with aclosing(stream):
                async for piece in stream:
                    if cancelled.is_set():
                        logger.info("Chat %s aborted", conversation_id)
                        break
                    yield piece
        finally:
            if self._active.get(conversation_id) is cancelled:
                del self._active[conversation_id]

    async def answer(self, path: str, message: str, top_k: int = DEFAULT_TOP_K) -> tuple[str, list[Chunk]]:
        """
        Non-streaming variant: one completion over a single RAG prompt.
        Returns the answer and the chunks it was grounded in.
        """
        chunks = self.store.retrieve(path, message, top_k)
        logger.info("Ask: retrieved %d chunks (pages=%s)", len(chunks), sorted({c.page_number for c in chunks}))
        text = await self._generate_fn(
            ollama_url=self.ollama_url,
            model=self.model,
            prompt=build_rag_prompt(message, chunks),
            temperature=self.temperature,
            timeout_s=self.timeout_s,
        )
        return text, chunks

    def abort(self, conversation_id: str) -> bool:
        cancelled = self._active.pop(conversation_id, None)
        if cancelled is None:
            return False
        cancelled.set()
        return True

    def is_active(self, conversation_id: str) -> bool:
        return conversation_id in self._active
