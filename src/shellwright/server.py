"""MCP server exposing the shellwright tools over stdio."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError as MCPToolError

from shellwright.config import ShellwrightConfig
from shellwright.interactive.manager import SessionManager
from shellwright.tool.builtin import (
    CreateDirTool,
    DeleteFileTool,
    EditFileTool,
    FileInfoTool,
    ListDirTool,
    MoveFileTool,
    ProcessesTool,
    ProcessInteractiveTool,
    ProcessKillTool,
    ReadFileTool,
    SearchTool,
    ShellTool,
    SystemInfoTool,
    WriteFileTool,
)
from shellwright.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)


def build_registry(config: ShellwrightConfig, manager: SessionManager) -> ToolRegistry:
    """Register the built-in tools against one session manager."""
    registry = ToolRegistry()
    registry.register_many(
        [
            ProcessInteractiveTool(manager, cwd=config.default_cwd),
            ShellTool(
                cwd=config.default_cwd,
                default_timeout_ms=config.shell.default_timeout_ms,
            ),
            ReadFileTool(
                cwd=config.default_cwd,
                max_file_read_mb=config.shell.max_file_read_mb,
            ),
            WriteFileTool(cwd=config.default_cwd),
            EditFileTool(cwd=config.default_cwd),
            DeleteFileTool(cwd=config.default_cwd),
            MoveFileTool(cwd=config.default_cwd),
            FileInfoTool(cwd=config.default_cwd),
            ListDirTool(cwd=config.default_cwd),
            CreateDirTool(cwd=config.default_cwd),
            SearchTool(cwd=config.default_cwd),
            ProcessesTool(),
            ProcessKillTool(),
            SystemInfoTool(),
        ]
    )
    return registry


def create_server(
    config: ShellwrightConfig | None = None,
    manager: SessionManager | None = None,
) -> FastMCP:
    """Create the MCP server.

    The server's lifespan owns the session manager: the reaper starts with
    the server and every live session is killed when it shuts down.
    """
    config = config or ShellwrightConfig()
    sm = manager or SessionManager(config.sessions)
    registry = build_registry(config, sm)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        async with sm:
            logger.info("Serving tools: %s", ", ".join(registry.names()))
            yield {"manager": sm, "registry": registry}

    mcp = FastMCP(
        name="shellwright",
        instructions=(
            "Shell, file and interactive-process tools. Use process_interactive to "
            "start REPLs or servers and talk to them across calls; poll with "
            "action=read, and kill sessions you no longer need."
        ),
        lifespan=lifespan,
    )

    async def _call(name: str, **arguments: Any) -> str:
        content, is_error = await registry.dispatch(
            name, {k: v for k, v in arguments.items() if v is not None}
        )
        if is_error:
            raise MCPToolError(content)
        return content

    # ------------------------------------------------------------------
    # Tool: process_interactive
    # ------------------------------------------------------------------
    @mcp.tool(description=ProcessInteractiveTool.description)
    async def process_interactive(
        action: Literal["start", "write", "read", "kill", "list"],
        command: str | None = None,
        cwd: str | None = None,
        session_id: str | None = None,
        input: str | None = None,
        timeout_ms: int | None = None,
    ) -> str:
        """Manage interactive processes.

        Args:
            action: start, write, read, kill or list.
            command: Command line to start (start).
            cwd: Working directory (start).
            session_id: Target session (write, read, kill).
            input: Text for stdin, include "\\n" for Enter (write).
            timeout_ms: Maximum wait in milliseconds (read, default 5000).
        """
        return await _call(
            ProcessInteractiveTool.name,
            action=action,
            command=command,
            cwd=cwd,
            session_id=session_id,
            input=input,
            timeout_ms=timeout_ms,
        )

    # ------------------------------------------------------------------
    # Tool: shell_exec
    # ------------------------------------------------------------------
    @mcp.tool(description=ShellTool.description)
    async def shell_exec(
        command: str,
        cwd: str | None = None,
        timeout_ms: int | None = None,
        stdin: str | None = None,
    ) -> str:
        return await _call(
            ShellTool.name, command=command, cwd=cwd, timeout_ms=timeout_ms, stdin=stdin
        )

    # ------------------------------------------------------------------
    # Tool: file_read
    # ------------------------------------------------------------------
    @mcp.tool(description=ReadFileTool.description)
    async def file_read(path: str, start_line: int = 0, end_line: int = -1) -> str:
        return await _call(
            ReadFileTool.name, path=path, start_line=start_line, end_line=end_line
        )

    # ------------------------------------------------------------------
    # Tool: file_write
    # ------------------------------------------------------------------
    @mcp.tool(description=WriteFileTool.description)
    async def file_write(
        path: str,
        content: str,
        mode: Literal["overwrite", "append"] = "overwrite",
        create_dirs: bool = True,
    ) -> str:
        return await _call(
            WriteFileTool.name,
            path=path,
            content=content,
            mode=mode,
            create_dirs=create_dirs,
        )

    # ------------------------------------------------------------------
    # Tool: file_edit
    # ------------------------------------------------------------------
    @mcp.tool(description=EditFileTool.description)
    async def file_edit(
        path: str, old_text: str, new_text: str, occurrence: int = 1
    ) -> str:
        return await _call(
            EditFileTool.name,
            path=path,
            old_text=old_text,
            new_text=new_text,
            occurrence=occurrence,
        )

    # ------------------------------------------------------------------
    # Tool: file_delete
    # ------------------------------------------------------------------
    @mcp.tool(description=DeleteFileTool.description)
    async def file_delete(path: str, recursive: bool = False) -> str:
        return await _call(DeleteFileTool.name, path=path, recursive=recursive)

    # ------------------------------------------------------------------
    # Tool: file_move
    # ------------------------------------------------------------------
    @mcp.tool(description=MoveFileTool.description)
    async def file_move(source: str, destination: str, overwrite: bool = False) -> str:
        return await _call(
            MoveFileTool.name,
            source=source,
            destination=destination,
            overwrite=overwrite,
        )

    # ------------------------------------------------------------------
    # Tool: file_info
    # ------------------------------------------------------------------
    @mcp.tool(description=FileInfoTool.description)
    async def file_info(path: str) -> str:
        return await _call(FileInfoTool.name, path=path)

    # ------------------------------------------------------------------
    # Tool: dir_list / dir_create
    # ------------------------------------------------------------------
    @mcp.tool(description=ListDirTool.description)
    async def dir_list(
        path: str = ".",
        depth: int = 1,
        include_hidden: bool = False,
        pattern: str = "*",
    ) -> str:
        return await _call(
            ListDirTool.name,
            path=path,
            depth=depth,
            include_hidden=include_hidden,
            pattern=pattern,
        )

    @mcp.tool(description=CreateDirTool.description)
    async def dir_create(path: str) -> str:
        return await _call(CreateDirTool.name, path=path)

    # ------------------------------------------------------------------
    # Tool: search
    # ------------------------------------------------------------------
    @mcp.tool(description=SearchTool.description)
    async def search(
        pattern: str,
        path: str = ".",
        type: Literal["files", "content"] = "files",
        file_pattern: str = "*",
        ignore_case: bool = True,
        max_results: int = 100,
    ) -> str:
        return await _call(
            SearchTool.name,
            pattern=pattern,
            path=path,
            type=type,
            file_pattern=file_pattern,
            ignore_case=ignore_case,
            max_results=max_results,
        )

    # ------------------------------------------------------------------
    # Tool: processes / process_kill
    # ------------------------------------------------------------------
    @mcp.tool(description=ProcessesTool.description)
    async def processes(
        sort_by: Literal["memory", "cpu", "name", "pid"] = "memory",
        limit: int = 30,
        filter: str | None = None,
    ) -> str:
        return await _call(
            ProcessesTool.name, sort_by=sort_by, limit=limit, filter=filter
        )

    @mcp.tool(description=ProcessKillTool.description)
    async def process_kill(
        pid: int | None = None, name: str | None = None, force: bool = False
    ) -> str:
        return await _call(ProcessKillTool.name, pid=pid, name=name, force=force)

    # ------------------------------------------------------------------
    # Tool: system_info
    # ------------------------------------------------------------------
    @mcp.tool(description=SystemInfoTool.description)
    async def system_info() -> str:
        return await _call(SystemInfoTool.name)

    return mcp
