from __future__ import annotations

import json
from collections.abc import AsyncIterator

import httpx


def _payload(model: str, prompt: str, system: str | None, temperature: float, stream: bool) -> dict:
    payload = {
        "model": model,
        "prompt": prompt,
        "stream": stream,
        "options": {
            "temperature": temperature,
        },
    }
    if system:
        payload["system"] = system
    return payload


async def generate_ollama(
    ollama_url: str,
    model: str,
    prompt: str,
    system: str | None = None,
    temperature: float = 0.2,
    timeout_s: float = 120.0,
) -> str:
    """
    Simple non-streaming generation.
    """
    async with httpx.AsyncClient(timeout=timeout_s) as client:
        r = await client.post(
            f"{ollama_url}/api/generate",
            json=_payload(model, prompt, system, temperature, stream=False),
        )
        r.raise_for_status()
        data = r.json()
        return data.get("response", "")


async def stream_ollama(
    ollama_url: str,
    model: str,
    prompt: str,
    system: str | None = None,
    temperature: float = 0.2,
    timeout_s: float = 120.0,
) -> AsyncIterator[str]:
    """
    Streaming generation. Ollama sends one JSON object per line; each carries
    a piece of the response until the final one with "done": true.
    """
    async with httpx.AsyncClient(timeout=timeout_s) as client:
        async with client.stream(
            "POST",
            f"{ollama_url}/api/generate",
            json=_payload(model, prompt, system, temperature, stream=True),
        ) as r:
            r.raise_for_status()
            async for line in r.aiter_lines():
                if not line.strip():
                    continue
                data = json.loads(line)
                piece = data.get("response", "")
                if piece:
                    yield piece
                if data.get("done"):
                    break


async def ollama_reachable(ollama_url: str, timeout_s: float = 3.0) -> bool:
    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            r = await client.get(f"{ollama_url}/api/tags")
            return r.status_code == 200
    except httpx.HTTPError:
        return False
