"""ASGI entry point, e.g. ``uvicorn src.main:app``.

Settings are read from the environment (and the ``.env`` file of ``APP_ENV``)
when the module is imported; the account store and mail backend follow from
``DATABASE_URL`` and ``EMAIL_BACKEND``.
"""

from src.core.application import create_application

app = create_application()
