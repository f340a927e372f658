#!/usr/bin/env python3
"""
Smoke test for a running edge chat router.
Exercises every route using configuration from config.yml.
"""

import asyncio
import json
from typing import Dict, Any

import httpx
import yaml

# Groq model used for the proxy check
MODEL = "llama-3.1-8b-instant"

def load_config() -> Dict[str, Any]:
    """Load configuration from config.yml"""
    with open("config.yml", encoding="utf-8") as file:
        return yaml.safe_load(file) or {}

async def test_feature(feature_name: str, test_func: callable):
    """Run a feature test with formatted output"""
    print(f"\n=== Testing {feature_name} ===")
    try:
        await test_func()
        print(f"✅ {feature_name} test passed")
    except Exception as e:
        print(f"❌ {feature_name} test failed: {str(e)}")
        raise

async def test_static_assets(client: httpx.AsyncClient, base_url: str):
    """The frontend is served from the root path"""
    resp = await client.get(f"{base_url}/")
    print(f"GET / -> {resp.status_code} ({resp.headers.get('content-type')})")

async def test_routing_errors(client: httpx.AsyncClient, base_url: str):
    """Wrong method on the chat endpoint and unknown API paths"""
    resp = await client.get(f"{base_url}/api/chat")
    assert resp.status_code == 405, f"Expected 405, got {resp.status_code}"
    assert resp.text == "Method not allowed"

    resp = await client.get(f"{base_url}/api/unknown")
    assert resp.status_code == 404, f"Expected 404, got {resp.status_code}"
    assert resp.text == "Not found"

async def test_chat_stream(client: httpx.AsyncClient, base_url: str):
    """Stream a chat completion from Workers AI"""
    request_data = {"messages": [{"role": "user", "content": "Hello!"}]}
    async with client.stream("POST", f"{base_url}/api/chat", json=request_data) as resp:
        resp.raise_for_status()
        assert resp.headers["content-type"] == "text/event-stream; charset=utf-8"
        async for line in resp.aiter_lines():
            line = line.strip()
            if not line.startswith("data: "):
                continue
            content = line[6:].strip()
            if content == "[DONE]":
                continue
            try:
                print(json.loads(content).get("response", ""), end="", flush=True)
            except json.JSONDecodeError:
                print("", end="", flush=True)
    print("\nStream completed")

async def test_chat_invalid_json(client: httpx.AsyncClient, base_url: str):
    """Malformed bodies surface as a generic 500"""
    resp = await client.post(f"{base_url}/api/chat", content=b"{oops", headers={"content-type": "application/json"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process request"}

async def test_groq_proxy(client: httpx.AsyncClient, base_url: str):
    """OpenAI-compatible chat completion through the Groq proxy"""
    request_data = {
        "model": MODEL,
        "messages": [{"role": "user", "content": "Hello!"}],
    }
    resp = await client.post(f"{base_url}/openai/v1/chat/completions", json=request_data)
    resp.raise_for_status()
    print("Chat completion received:", resp.json()["choices"][0]["message"]["content"][:60])

async def run_tests():
    """Run all feature tests"""
    config = load_config()
    server_config = config.get("server", {})

    host = server_config.get("host", "0.0.0.0")
    host = "127.0.0.1" if host == "0.0.0.0" else host
    port = server_config.get("port", 8787)
    base_url = f"http://{host}:{port}"

    async with httpx.AsyncClient(timeout=60.0) as client:
        await test_feature("Static Assets", lambda: test_static_assets(client, base_url))
        await test_feature("Routing Errors", lambda: test_routing_errors(client, base_url))
        await test_feature("Chat Stream", lambda: test_chat_stream(client, base_url))
        await test_feature("Chat Invalid JSON", lambda: test_chat_invalid_json(client, base_url))
        await test_feature("Groq Proxy", lambda: test_groq_proxy(client, base_url))

if __name__ == "__main__":
    print("Running edge chat router smoke tests")
    asyncio.run(run_tests())
