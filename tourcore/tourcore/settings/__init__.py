import os

# DJANGO_ENV=prod activa la configuración de producción (Postgres + whitenoise)
if os.environ.get("DJANGO_ENV") == "prod":
    from .prod import *  # noqa: F401,F403
else:
    from .base import *  # noqa: F401,F403
