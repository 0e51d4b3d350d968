"""File system, YAML, Markdown outline and formatter adapters."""
