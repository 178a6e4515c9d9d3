"""Net Pay MCP Server - FastMCP implementation for pay estimate tools."""

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from netpay.sdk import build_declaration, compute, load_preferences, load_tax_rules

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("net-pay")


# --- Tools ---

@mcp.tool()
async def calculate_pay(
    declaration: dict[str, Any] = Field(
        description=(
            "Wage declaration for one pay period. Keys: hours {normal, overtime150, overtime200, standby}, "
            "worked_days, rates {base, standby, overtime150_multiplier, overtime200_multiplier}, "
            "earnings_items, reimbursements, deductions, tax_config"
        )
    ),
) -> dict[str, Any]:
    """Estimate net pay: itemized earnings, deductions (estimated tax first) and totals."""
    try:
        preferences = load_preferences()
        rules = load_tax_rules(preferences.rules_path)
        result = compute(build_declaration(declaration, rules, preferences), rules)
        return result.model_dump(mode="json")
    except (ValidationError, ValueError) as e:
        logger.error(f"Error calculating pay: {e}")
        return {"error": str(e)}


@mcp.tool()
async def list_tax_presets() -> dict[str, Any]:
    """List flat-rate tax presets and the default preset id."""
    try:
        rules = load_tax_rules(load_preferences().rules_path)
        return {
            "presets": [preset.model_dump(mode="json") for preset in rules.presets],
            "default": rules.defaults.tax_preset_id,
        }
    except (OSError, ValueError) as e:
        logger.error(f"Error listing tax presets: {e}")
        return {"error": str(e), "presets": [], "default": None}


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
