#!/usr/bin/env python3
"""
Configuration module for the edge chat router.
Loads settings from a YAML file and initializes logging with Pydantic validation.
"""

import os
import sys
import logging
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from edge_router.shared.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_ID,
    DEFAULT_SYSTEM_PROMPT,
    GROQ_API_HOST,
    WORKERS_AI_BASE_URL,
)

CONFIG_FILE = os.environ.get("EDGE_ROUTER_CONFIG", "config.yml")

logger = logging.getLogger("edge-router")


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: str = "INFO"
    http_log_level: str = "INFO"
    http_timeout: float = 600.0
    metrics_port: Optional[int] = None


class AssetsConfig(BaseModel):
    directory: str = "public"
    html: bool = True


class ChatConfig(BaseModel):
    model_config = {"protected_namespaces": ()}

    model_id: str = DEFAULT_MODEL_ID
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_tokens: int = DEFAULT_MAX_TOKENS


class GatewayConfig(BaseModel):
    id: str
    skip_cache: bool = False
    cache_ttl: int = 3600


class WorkersAIConfig(BaseModel):
    account_id: str = ""
    api_token: str = ""
    base_url: str = WORKERS_AI_BASE_URL
    gateway: Optional[GatewayConfig] = None


class ProxyConfig(BaseModel):
    upstream_host: str = GROQ_API_HOST
    api_key: Optional[str] = None


class RequestProxyConfig(BaseModel):
    enabled: bool = False
    url: Optional[str] = None


class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    assets: AssetsConfig = Field(default_factory=AssetsConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    workers_ai: WorkersAIConfig = Field(default_factory=WorkersAIConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    request_proxy: RequestProxyConfig = Field(
        default_factory=RequestProxyConfig, alias="requestProxy"
    )

    model_config = {"frozen": True, "populate_by_name": True}


def apply_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """Secrets are usually provisioned through the environment, not the file."""
    if "GROQ_API_KEY" in os.environ:
        config_data.setdefault("proxy", {})["api_key"] = os.environ["GROQ_API_KEY"]
    if "CLOUDFLARE_ACCOUNT_ID" in os.environ:
        config_data.setdefault("workers_ai", {})["account_id"] = os.environ["CLOUDFLARE_ACCOUNT_ID"]
    if "CLOUDFLARE_API_TOKEN" in os.environ:
        config_data.setdefault("workers_ai", {})["api_token"] = os.environ["CLOUDFLARE_API_TOKEN"]
    return config_data


def load_config(path: str = CONFIG_FILE) -> AppConfig:
    """Load and validate configuration with Pydantic models."""
    try:
        with open(path, encoding="utf-8") as file:
            config_data = yaml.safe_load(file) or {}

        config_data = apply_env_overrides(config_data)
        return AppConfig.model_validate(config_data)
    except FileNotFoundError:
        print(f"Configuration file {path} not found. "
              "Please create it based on config.yml.example.")
        sys.exit(1)
    except (yaml.YAMLError, ValidationError) as e:
        print(f"Error in configuration: {e}")
        sys.exit(1)


def setup_logging(config_: AppConfig) -> logging.Logger:
    """Configure logging based on validated configuration."""
    log_level = config_.server.log_level
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level_int,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.setLevel(log_level_int)
    logger.info("Logging level set to %s", log_level)
    return logger
