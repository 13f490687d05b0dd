"""
Services Package - Session persistence and the workflow service
"""
from .kv_ports import (
    DiskCacheKeyValueStore,
    InMemoryKeyValueStore,
    KeyValuePort,
    build_port,
)
from .session_store import SessionSnapshot, SessionStore
from .workflow_service import (
    ClipboardPort,
    PrintPort,
    WorkflowService,
    format_pathway_result,
)

__all__ = [
    "DiskCacheKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValuePort",
    "build_port",
    "SessionSnapshot",
    "SessionStore",
    "ClipboardPort",
    "PrintPort",
    "WorkflowService",
    "format_pathway_result",
]
