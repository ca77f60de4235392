"""
metaimport service package.

Answers ``?go-get=1`` discovery requests from the Go toolchain with an HTML
page carrying a ``go-import`` meta tag. It provides:

- app.main: FastAPI surface, CLI entry point and uvicorn runner.
- app.config: Loading and validation of the JSON redirector document.
- app.rules: Rule table, templates and the longest-prefix resolver.
- app.handler: Protocol checks and mapping of resolutions to HTTP outcomes.
- app.rendering: The go-import HTML page.

Guidelines:
- The service is stateless; the rule table is built once and never mutated.
- Resolution is pure CPU work and never awaits.
"""
