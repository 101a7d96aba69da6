"""MCP tool surface for studysheet."""
