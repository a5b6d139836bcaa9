"""OmniOutliner scripting bridge."""

from omnioutliner_mcp.outliner.bridge import (
    ConnectionStatus,
    OutlinerBridge,
    ScriptExecutor,
    check_connection,
)

__all__ = ["ConnectionStatus", "OutlinerBridge", "ScriptExecutor", "check_connection"]
