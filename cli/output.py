#!/usr/bin/env python3
"""
Output Formatting Module for the NFT Registry CLI

Formats replay reports, snapshots and configuration as tables, JSON or YAML.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel
from tabulate import tabulate


OUTPUT_FORMATS = ['table', 'json', 'yaml']


class OutputFormatter:
    """Universal output formatter for CLI results."""

    def __init__(self, format_type: str = 'table', max_width: int = 60):
        """
        Initialize output formatter.

        Args:
            format_type: Output format (table, json, yaml)
            max_width: Maximum column width for table output
        """
        if format_type not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {format_type}")
        self.format_type = format_type
        self.max_width = max_width

    def format(self, data: Any) -> str:
        """Format data according to the configured format type."""
        data = to_plain(data)

        if self.format_type == 'json':
            return json.dumps(data, indent=2, default=str)
        elif self.format_type == 'yaml':
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip()
        else:
            return self.format_table(data)

    def format_table(self, data: Any) -> str:
        """Format data as a table, one section per top-level list."""
        if isinstance(data, dict):
            sections = []
            scalars = {k: v for k, v in data.items() if not isinstance(v, (list, dict))}
            if scalars:
                sections.append(self._format_dict_table(scalars))
            for key, value in data.items():
                if isinstance(value, dict):
                    sections.append(f"[{key}]\n" + self._format_dict_table(value))
                elif isinstance(value, list):
                    sections.append(f"[{key}]\n" + self._format_list_table(value))
            return '\n\n'.join(sections)
        elif isinstance(data, list):
            return self._format_list_table(data)
        return str(data)

    def _format_dict_table(self, data: Dict[str, Any]) -> str:
        """Format dictionary as a key-value table."""
        if not data:
            return "(empty)"
        table_data = [[key, self._format_value(value)] for key, value in data.items()]
        return tabulate(table_data, tablefmt='plain', disable_numparse=True)

    def _format_list_table(self, data: List[Any], headers: Optional[List[str]] = None) -> str:
        """Format list as a table."""
        if not data:
            return "No data available"

        if not isinstance(data[0], dict):
            return tabulate([[self._format_value(item)] for item in data], tablefmt='plain',
                            disable_numparse=True)

        if headers is None:
            headers = []
            for item in data:
                headers.extend(k for k in item.keys() if k not in headers)

        table_data = [
            [self._format_value(item.get(h, '')) for h in headers]
            for item in data
        ]
        return tabulate(table_data, headers=headers, tablefmt='grid',
                        maxcolwidths=self.max_width, disable_numparse=True)

    def _format_value(self, value: Any) -> str:
        """Format individual values for display."""
        if value is None:
            return ''
        elif isinstance(value, bool):
            return 'yes' if value else 'no'
        elif isinstance(value, datetime):
            return value.strftime("%Y-%m-%d %H:%M:%S")
        elif isinstance(value, (dict, list)):
            return json.dumps(value, default=str)
        return str(value)


def to_plain(data: Any) -> Any:
    """Convert pydantic models (possibly nested in containers) to plain data."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode='json')
    elif isinstance(data, dict):
        return {k: to_plain(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [to_plain(v) for v in data]
    return data