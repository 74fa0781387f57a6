"""FastAPI application - Query Governance Service.

Run with:
    PYTHONPATH=src uvicorn querygov_svc.app:app --host 0.0.0.0 --port 8060
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from . import __version__
from .audit import CorrelationAuditBridge, create_bridge
from .config import Config
from .mapping import FieldMappingService, StaticColumnProvider, load_columns_from_yaml
from .mapping import routes as mapping_routes
from .queries import InMemoryQueryStore, QueryLifecycleManager, QueryStore, SqliteQueryStore
from .queries import ReferenceUsageOracle
from .queries import routes as query_routes

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "QUERYGOV_CONFIG"

# Global components (initialized in lifespan)
_audit: CorrelationAuditBridge | None = None
_store: QueryStore | None = None


def load_config() -> Config:
    """Load config from the YAML file named by QUERYGOV_CONFIG, else defaults."""
    path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return Config()
    logger.info(f"Loading configuration from {path}")
    return Config.from_yaml(path)


def create_store(config: Config) -> QueryStore:
    backend = config.store.backend.lower()
    if backend == "memory":
        return InMemoryQueryStore()
    if backend == "sqlite":
        return SqliteQueryStore(config.store.db_path)
    raise ValueError(f"Unknown store backend: {config.store.backend}")


def build_components(config: Config) -> tuple[QueryLifecycleManager, FieldMappingService, CorrelationAuditBridge]:
    """Build and wire the service components from configuration."""
    audit = create_bridge(config.audit)
    store = create_store(config)
    manager = QueryLifecycleManager(
        store=store,
        usage_oracle=ReferenceUsageOracle(),
        audit=audit,
        config=config,
    )

    if config.mapping.columns_file:
        provider = load_columns_from_yaml(config.mapping.columns_file)
    else:
        provider = StaticColumnProvider()
    mapping = FieldMappingService(config=config.mapping, column_provider=provider)

    query_routes.configure(manager)
    mapping_routes.configure(mapping, manager=manager, audit=audit)
    return manager, mapping, audit


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    global _audit, _store

    logger.info("Starting query governance service...")

    config = load_config()
    app.state.config = config

    manager, _mapping, _audit = build_components(config)
    _store = manager.store
    logger.info(
        f"Query governance service started (store={config.store.backend}, audit={config.audit.sink_type})"
    )

    yield

    logger.info("Shutting down query governance service...")
    _store.close()
    _audit.close()
    logger.info("Query governance service stopped")


# Create FastAPI app
app = FastAPI(
    title="Query Governance Service",
    description="Governed lifecycle of shared SQL query definitions and confidence-scored field mapping.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(query_routes.router)
app.include_router(mapping_routes.router)


@app.get("/health")
async def health() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "audit": _audit.stats if _audit else {},
    }


@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "Query Governance Service",
        "version": __version__,
        "endpoints": {
            "/queries": "GET list, POST create",
            "/queries/{id}": "GET, PATCH (expected_version), DELETE (justification)",
            "/queries/validate": "POST - dry-run governance checks",
            "/queries/templates": "Starter query templates",
            "/queries/{id}/mappings": "Mapping suggestions for a stored query",
            "/mappings/suggest": "POST - rank archetypes for columns",
            "/mappings/rescore": "POST - re-score suggestions",
            "/health": "Health check",
        },
    }


def run():
    """Run the service with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config()
    uvicorn.run(
        "querygov_svc.app:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
    )


if __name__ == "__main__":
    run()
