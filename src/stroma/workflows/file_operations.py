#!/usr/bin/env python3
"""
File operations workflow.

Places track what the agent currently knows (a found file, file content,
search results); transitions are the file tools. Handlers simulate the tools
so the net can be explored without touching the filesystem.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..cpn import ColoredNet, Token, cpn

logger = logging.getLogger(__name__)

SEARCH_RESULTS = ["file1.ts", "file2.ts", "README.md"]

REQUIREMENT_DESCRIPTIONS = {
    'file_found': 'a found file',
    'file_read': 'file content',
    'search_results': 'search results',
    'file_written': 'a written file',
    'start': 'initial state',
}


def _has_results(token: Token) -> bool:
    color = token.color
    return isinstance(color, Mapping) and bool(color.get('results'))


def _has_content(binding: Mapping[str, Any]) -> bool:
    file_token = binding.get('file_read_token') or {}
    return file_token.get('content') is not None


@cpn.net
def FileOperations(builder):
    start = builder.place('start', 'Start', 'Initial state - no context')
    file_found = builder.place('file_found', 'File Found', 'A file has been located')
    file_read = builder.place('file_read', 'File Read', 'File content is available')
    search_results = builder.place('search_results', 'Search Results', 'Search has returned results')
    file_written = builder.place('file_written', 'File Written', 'File has been written/updated')
    builder.place('error_state', 'Error State', 'An error occurred')

    @builder.transition('search:files', id='search_files', description='Search for files by pattern')
    async def search_files(binding):
        query = binding.get('query') or '*.ts'
        logger.info("Searching for files matching: %s", query)
        return {'query': query, 'results': list(SEARCH_RESULTS)}

    @builder.transition('read:file', id='read_file', description='Read file content')
    async def read_file(binding):
        file_token = binding.get('file_found_token') or {}
        path = file_token.get('path')
        if not path:
            raise ValueError('No file token found. You must find a file first using search:files')
        logger.info("Reading file: %s", path)
        return {
            'path': path,
            'content': f"// Content of {path}\nexport function example() {{ return 42; }}",
            'exists': True,
        }

    @builder.transition('write:file', id='write_file', description='Write content to file')
    async def write_file(binding):
        file_token = binding['file_read_token']
        logger.info("Writing to file: %s", file_token.get('path'))
        return {'path': file_token.get('path'), 'content': file_token.get('content'), 'exists': True}

    @builder.transition('search:file:read', id='search_read', description='Search for a file and read it')
    async def search_read(binding):
        results = binding['search_results_token'].get('results') or []
        if not results:
            raise ValueError('No files found')
        first_file = results[0]
        logger.info("Reading first search result: %s", first_file)
        return {'path': first_file, 'content': f"// Content of {first_file}", 'exists': True}

    @builder.transition('modify:file:write', id='modify_write',
                        description='Modify and write file content', guard=_has_content)
    async def modify_write(binding):
        file_token = binding['file_read_token']
        logger.info("Modifying and writing file: %s", file_token.get('path'))
        return {
            'path': file_token.get('path'),
            'content': file_token['content'] + '\n// Modified by AI',
            'exists': True,
        }

    builder.arc(start, search_files, id='start_to_search')
    builder.arc(search_files, search_results, id='search_to_results', expression=lambda result: result)
    builder.arc(search_results, search_read, id='results_to_search_read', pattern=_has_results)
    builder.arc(search_read, file_read, id='search_read_to_file_read')
    builder.arc(file_found, read_file, id='found_to_read')
    builder.arc(read_file, file_read, id='read_to_content')
    builder.arc(file_read, modify_write, id='content_to_modify')
    builder.arc(file_read, write_file, id='content_to_write')
    builder.arc(write_file, file_written, id='write_to_written')
    builder.arc(modify_write, file_written, id='modify_to_written')


def create_file_operations_net() -> ColoredNet:
    """Fresh file-operations net with an empty marking"""
    return FileOperations.create()
