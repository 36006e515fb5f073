"""Main application entry point.

Serve with any ASGI server, e.g. ``uvicorn turnstile.main:app``.
"""

from turnstile.core.application import create_application
from turnstile.core.initialization import initialize_application

initialize_application()

app = create_application()
