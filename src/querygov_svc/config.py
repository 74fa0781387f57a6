"""Configuration for the query governance service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8060
    reload: bool = False


@dataclass
class GovernanceConfig:
    """SQL governance checks."""
    min_sql_length: int = 10
    max_sql_length: int = 10000
    detect_injection: bool = True
    strictness: str = "HIGH"  # HIGH | STANDARD


@dataclass
class ComplexityConfig:
    """Structural complexity limits for stored queries."""
    max_joins: int = 10
    max_subqueries: int = 5
    max_nesting_depth: int = 5
    max_parameters: int = 20


@dataclass
class PolicyConfig:
    """Field policy applied to query definitions."""
    max_execution_time_seconds: int = 30
    max_result_rows: int = 100
    min_justification_length: int = 20
    max_justification_length: int = 1000
    min_name_length: int = 3
    max_name_length: int = 100
    max_description_length: int = 500


@dataclass
class MappingConfig:
    """Field mapping thresholds."""
    min_confidence: float = 0.5
    fuzzy_threshold: float = 0.6
    fuzzy_discount: float = 0.7

    # >1 scores columns on a thread pool
    max_workers: int = 1

    # YAML file of column metadata keyed by query id
    columns_file: str | None = None


@dataclass
class StoreConfig:
    """Query definition store."""
    backend: str = "memory"  # memory | sqlite
    db_path: str = "query_definitions.db"


@dataclass
class AuditConfig:
    """Audit sink configuration."""
    enabled: bool = True
    sink_type: str = "log"  # log | console | file
    sink_config: dict[str, Any] = field(default_factory=dict)


@dataclass
class Config:
    """Main configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    governance: GovernanceConfig = field(default_factory=GovernanceConfig)
    complexity: ComplexityConfig = field(default_factory=ComplexityConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    mapping: MappingConfig = field(default_factory=MappingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        return cls(
            server=ServerConfig(**data.get("server", {})),
            governance=GovernanceConfig(**data.get("governance", {})),
            complexity=ComplexityConfig(**data.get("complexity", {})),
            policy=PolicyConfig(**data.get("policy", {})),
            mapping=MappingConfig(**data.get("mapping", {})),
            store=StoreConfig(**data.get("store", {})),
            audit=AuditConfig(**data.get("audit", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)
