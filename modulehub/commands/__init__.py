"""Click commands for the modulehub CLI."""
