"""MCP server for gochunk-mcp."""

import asyncio
import json
import os

from mcp.server import Server
from mcp.types import Tool, TextContent

from .storage.chunk_store import STORE_ENV_VAR
from .tools.chunk_project import chunk_project
from .tools.list_projects import list_projects
from .tools.get_chunk import get_chunk, get_chunks
from .tools.search_chunks import search_chunks


ENTITY_TYPES = ["function", "method", "type", "const", "var"]


# Create server
server = Server("gochunk-mcp")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="chunk_project",
            description="Chunk a local Go module and its vendored dependencies. Loads and type-checks every package, extracts functions, methods, types, constants and variables with their metadata, and saves the chunks to local storage.",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the Go module root (must contain go.mod; supports ~ for home directory)"
                    }
                },
                "required": ["path"]
            }
        ),
        Tool(
            name="list_projects",
            description="List all chunked projects.",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
        Tool(
            name="get_chunk",
            description="Get one stored chunk: its source text with import aliases expanded, and its metadata.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": {
                        "type": "string",
                        "description": "Project identifier (local/name or just name)"
                    },
                    "chunk_id": {
                        "type": "string",
                        "description": "Chunk ID from search_chunks"
                    }
                },
                "required": ["project", "chunk_id"]
            }
        ),
        Tool(
            name="get_chunks",
            description="Get several stored chunks in one call.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": {
                        "type": "string",
                        "description": "Project identifier (local/name or just name)"
                    },
                    "chunk_ids": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "List of chunk IDs to retrieve"
                    }
                },
                "required": ["project", "chunk_ids"]
            }
        ),
        Tool(
            name="search_chunks",
            description="Search the chunks of a project. Matches entity names, accessed symbols (e.g. 'net/http.Get') and source text.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": {
                        "type": "string",
                        "description": "Project identifier (local/name or just name)"
                    },
                    "query": {
                        "type": "string",
                        "description": "Search query"
                    },
                    "entity_type": {
                        "type": "string",
                        "description": "Optional filter by entity type",
                        "enum": ENTITY_TYPES
                    },
                    "file_pattern": {
                        "type": "string",
                        "description": "Optional glob pattern to filter files (e.g., '*/internal/*.go')"
                    },
                    "include_vendored": {
                        "type": "boolean",
                        "description": "Include chunks from vendored dependencies",
                        "default": False
                    },
                    "max_results": {
                        "type": "integer",
                        "description": "Maximum number of results to return",
                        "default": 10
                    }
                },
                "required": ["project", "query"]
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    storage_path = os.environ.get(STORE_ENV_VAR)

    try:
        if name == "chunk_project":
            result = chunk_project(
                path=arguments["path"],
                storage_path=storage_path
            )
        elif name == "list_projects":
            result = list_projects(storage_path=storage_path)
        elif name == "get_chunk":
            result = get_chunk(
                project=arguments["project"],
                chunk_id=arguments["chunk_id"],
                storage_path=storage_path
            )
        elif name == "get_chunks":
            result = get_chunks(
                project=arguments["project"],
                chunk_ids=arguments["chunk_ids"],
                storage_path=storage_path
            )
        elif name == "search_chunks":
            result = search_chunks(
                project=arguments["project"],
                query=arguments["query"],
                entity_type=arguments.get("entity_type"),
                file_pattern=arguments.get("file_pattern"),
                include_vendored=arguments.get("include_vendored", False),
                max_results=arguments.get("max_results", 10),
                storage_path=storage_path
            )
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except Exception as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}, indent=2))]


async def run_server():
    """Run the MCP server."""
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options()
        )


def main():
    """Main entry point."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
