#!/usr/bin/env python3
"""
Dependency provider functions for the application.
"""

from fastapi import Request
import httpx

from edge_router.services.assets import AssetFetcher
from edge_router.services.inference import InferenceBackend
from edge_router.shared.config import AppConfig

def get_config(request: Request) -> AppConfig:
    """Returns the validated application configuration."""
    return request.app.state.config

def get_http_client(request: Request) -> httpx.AsyncClient:
    """Returns the shared httpx.AsyncClient instance."""
    return request.app.state.http_client

def get_inference(request: Request) -> InferenceBackend:
    """Returns the inference backend used by the chat endpoint."""
    return request.app.state.inference

def get_assets(request: Request) -> AssetFetcher:
    """Returns the static asset fetcher."""
    return request.app.state.assets
