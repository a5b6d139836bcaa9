"""Run JXA scripts against OmniOutliner through osascript."""

import asyncio
import contextlib
import json
import logging
import time
from typing import Any, Protocol

from pydantic import BaseModel

from omnioutliner_mcp.config.loader import Settings, get_settings
from omnioutliner_mcp.mcp.errors import AppError, ErrorCode
from omnioutliner_mcp.outliner import scripts

logger = logging.getLogger(__name__)


class ScriptExecutor(Protocol):
    """Anything that can run a script and return its JSON object result."""

    async def execute(self, script: str) -> dict[str, Any]: ...


class ConnectionStatus(BaseModel):
    """Result of a connection check."""

    connected: bool
    appRunning: bool
    documentOpen: bool
    documentName: str | None = None
    message: str
    proRequired: bool = False


class OutlinerBridge:
    """
    Executes scripts with `osascript -l JavaScript`.

    Each call starts a fresh osascript process, so calls are independent and
    may run concurrently.
    """

    def __init__(self, osascript_path: str = "/usr/bin/osascript", timeout: float = 30):
        self.osascript_path = osascript_path
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "OutlinerBridge":
        settings = settings or get_settings()
        return cls(settings.osascript_path, settings.script_timeout)

    async def execute(self, script: str) -> dict[str, Any]:
        """Run a script and return its parsed result object."""
        output = await self.execute_raw(script)
        return self.parse_result(output)

    async def execute_raw(self, script: str) -> str:
        """Run a script and return stdout as text."""
        start = time.perf_counter()
        returncode, stdout, stderr = await self._run_osascript(script)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"osascript finished in {elapsed:.1f}ms (exit {returncode})")

        if returncode != 0:
            raise self.classify_failure(stderr)
        return stdout.strip()

    async def _run_osascript(self, script: str) -> tuple[int, str, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                self.osascript_path,
                "-l",
                "JavaScript",
                "-e",
                script,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Could not launch {self.osascript_path}: {e}")
            raise AppError.operation_failed(str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self.timeout)
        except asyncio.TimeoutError as e:
            # The process may exit between the timeout and the kill
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.warning(f"Script timed out after {self.timeout}s")
            raise AppError.operation_failed(
                f"Script timed out after {self.timeout} seconds"
            ) from e

        return (
            process.returncode if process.returncode is not None else -1,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    @staticmethod
    def classify_failure(stderr: str) -> AppError:
        """Map osascript's stderr to an application error."""
        if "Pro feature" in stderr:
            return AppError.pro_required()
        if "-1743" in stderr or "not allowed" in stderr:
            return AppError.permission_denied()
        return AppError.operation_failed(stderr.strip() or None)

    @staticmethod
    def parse_result(output: str) -> dict[str, Any]:
        """
        Interpret a script's JSON output.

        Raises AppError when the script reported an error object or printed
        something that is not a JSON object.
        """
        try:
            parsed = json.loads(output)
        except json.JSONDecodeError as e:
            raise AppError.operation_failed(f"Could not parse script output: {output[:200]}") from e

        if not isinstance(parsed, dict):
            raise AppError.operation_failed(f"Unexpected script output: {output[:200]}")

        error = parsed.get("error")
        if isinstance(error, dict):
            raise AppError(
                ErrorCode.from_value(error.get("code")),
                error.get("message") or "Unknown error",
                error.get("suggestion"),
                error.get("technicalDetail"),
            )

        if "result" in parsed:
            result = parsed["result"]
            return result if isinstance(result, dict) else {"value": result}

        return parsed

    async def check_connection(self) -> ConnectionStatus:
        """Report whether OmniOutliner is reachable. Never raises."""
        return await check_connection(self)


async def check_connection(executor: ScriptExecutor) -> ConnectionStatus:
    """Run the connection check through any executor and summarize the outcome."""
    try:
        data = await executor.execute(scripts.CHECK_CONNECTION)
    except AppError as e:
        return ConnectionStatus(
            connected=False,
            appRunning=e.code != ErrorCode.APP_NOT_RUNNING,
            documentOpen=False,
            message=e.display_text,
            proRequired=e.code == ErrorCode.PRO_REQUIRED,
        )

    return ConnectionStatus(
        connected=bool(data.get("connected", False)),
        appRunning=bool(data.get("appRunning", False)),
        documentOpen=bool(data.get("documentOpen", False)),
        documentName=data.get("documentName"),
        message=data.get("message") or "",
    )
