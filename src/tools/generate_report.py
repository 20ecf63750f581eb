"""MCP tool that generates a CodeRabbit developer activity report.

Registers 'generateReport', the one operation still served by the public
CodeRabbit API. Results are cached by the client.
"""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP

from clients.coderabbit import CodeRabbitClient
from clients.github.inputs import validate_report_date
from tools.formatting import format_report


def register(mcp: FastMCP, *, coderabbit_client: CodeRabbitClient) -> None:
    @mcp.tool(name="generateReport")
    async def generate_report(
        from_date: str,
        to_date: str,
        prompt: Optional[str] = None,
        group_by: Optional[str] = None,
        org_id: Optional[str] = None,
    ) -> str:
        """Generate a developer activity report (Beta). May take up to 10 minutes.

        Params:
          - from_date: start date, YYYY-MM-DD or ISO datetime (e.g. 2025-01-01T00:00:00Z).
          - to_date: end date, same formats.
          - prompt: optional custom prompt for the report.
          - group_by: optional field to group results by.
          - org_id: optional organization ID.

        Returns:
          Markdown report; structured results are rendered as a JSON block.

        Raises:
          ValidationError for malformed dates; ExternalServiceError when
          CodeRabbit fails.
        """
        from_clean = validate_report_date(from_date, field="from")
        to_clean = validate_report_date(to_date, field="to")

        report = await coderabbit_client.generate_report(
            from_date=from_clean,
            to_date=to_clean,
            prompt=prompt,
            group_by=group_by,
            org_id=org_id,
        )
        return format_report(report, from_date=from_clean, to_date=to_clean)
