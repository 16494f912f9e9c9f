# tourcore/apps/core/api.py
from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Optional

from django.http import HttpRequest, JsonResponse

from .errors import DomainError, ValidationError

logger = logging.getLogger(__name__)


def error_response(kind: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"kind": kind, "message": message}}, status=status)


def read_json(request: HttpRequest) -> dict:
    """Cuerpo JSON como dict. Cuerpo vacío → {}."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise ValidationError("El cuerpo de la petición no es JSON válido.")
    if not isinstance(data, dict):
        raise ValidationError("Se esperaba un objeto JSON.")
    return data


def int_param(value: Any, name: str, *, required: bool = True) -> Optional[int]:
    if value in (None, ""):
        if required:
            raise ValidationError(f"Falta el parámetro '{name}'.")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"'{name}' debe ser un entero.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{name}' debe ser un entero.")


def api_view(*methods: str):
    """
    Envuelve una vista JSON:
      - rechaza métodos no listados (405)
      - convierte DomainError en 4xx con {"error": {"kind", "message"}}
      - registra y devuelve 500 ante cualquier otro fallo (sin reintentos)
    """
    allowed = {m.upper() for m in methods}

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request: HttpRequest, *args, **kwargs):
            if allowed and request.method not in allowed:
                resp = error_response("method_not_allowed", "Método no permitido.", 405)
                resp["Allow"] = ", ".join(sorted(allowed))
                return resp
            try:
                return view_func(request, *args, **kwargs)
            except DomainError as exc:
                return JsonResponse({"error": exc.as_dict()}, status=exc.status_code)
            except Exception:
                logger.exception("Fallo inesperado en %s %s", request.method, request.path)
                return error_response("server_error", "Error interno del servidor.", 500)
        return _wrapped
    return decorator


def login_required_json(view_func):
    @wraps(view_func)
    def _wrapped(request: HttpRequest, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response("unauthenticated", "Debes iniciar sesión.", 401)
        return view_func(request, *args, **kwargs)
    return _wrapped


def _user_is_admin(request: HttpRequest) -> bool:
    u = request.user
    return bool(u.is_authenticated and (u.is_staff or u.is_superuser))


def staff_required_json(view_func):
    @wraps(view_func)
    def _wrapped(request: HttpRequest, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response("unauthenticated", "Debes iniciar sesión.", 401)
        if not _user_is_admin(request):
            return error_response("forbidden", "Solo administradores.", 403)
        return view_func(request, *args, **kwargs)
    return _wrapped
