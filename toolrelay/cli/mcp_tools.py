#!/usr/bin/env python3
"""
MCP tools CLI.

Lists the tools of the configured MCP servers or invokes one of them.
Servers are read from MCP_SERVERS / MCP_CONFIG_FILE.

Usage:
    python -m toolrelay.cli.mcp_tools list
    python -m toolrelay.cli.mcp_tools list --server fetch
    python -m toolrelay.cli.mcp_tools call fetch fetch '{"url": "https://example.com"}'
"""

import argparse
import asyncio
import json
import logging
import sys

from toolrelay.configuration.config import get_settings
from toolrelay.infrastructure.agent.errors import MCPError
from toolrelay.infrastructure.agent.mcp.manager import MCPToolManager


async def list_tools(manager: MCPToolManager, server: str | None = None) -> int:
    """
    Print tools and connection state of the configured servers.

    Returns:
        Process exit code
    """
    names = [server] if server else None
    states = await manager.initialize(names)

    for name, tools in manager.list_all_tools_by_server():
        for tool in tools:
            print(f"{name}/{tool.name}: {tool.description or ''}")

    print()
    for name, state in states.items():
        line = f"{name}: {state.status.value} ({state.counts.tools} tools)"
        if state.error is not None:
            line += f" - {state.error}"
        print(line)

    return 0 if all(state.error is None for state in states.values()) else 1


async def call_tool(manager: MCPToolManager, server: str, tool: str, args_json: str) -> int:
    """
    Invoke one tool and print the result as JSON.

    Returns:
        Process exit code
    """
    try:
        result = await manager.invoke_tool(server, tool, args_json)
    except MCPError as e:
        print(json.dumps({"error": e.to_dict()}, indent=2, ensure_ascii=False))
        return 1

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


async def run(args: argparse.Namespace) -> int:
    manager = MCPToolManager.from_settings()
    try:
        if args.command == "list":
            return await list_tools(manager, args.server)
        return await call_tool(manager, args.server, args.tool, args.args_json)
    finally:
        await manager.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="List and invoke MCP server tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List tools of configured servers")
    list_parser.add_argument("--server", help="Only list this server")

    call_parser = subparsers.add_parser("call", help="Invoke a tool")
    call_parser.add_argument("server", help="Server name")
    call_parser.add_argument("tool", help="Tool name")
    call_parser.add_argument(
        "args_json", nargs="?", default="{}", help="Tool arguments as a JSON object"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
