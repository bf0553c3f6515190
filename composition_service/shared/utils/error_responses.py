# composition_service/shared/utils/error_responses.py

# Respostas de erro genéricas
common_errors = {
    500: {
        "description": "Internal server error",
        "content": {
            "application/json": {
                "example": {"success": False, "error": "Internal server error.", "code": "INTERNAL_SERVER_ERROR"}
            }
        }
    }
}

unauthorized_error = {
    401: {
        "description": "Unauthorized (missing, invalid or revoked token)",
        "content": {
            "application/json": {
                "examples": {
                    "missing_header": {
                        "summary": "Missing header",
                        "value": {"detail": "Authorization header required"}
                    },
                    "revoked": {
                        "summary": "Revoked token",
                        "value": {"detail": "Token is invalidated"}
                    },
                    "invalid": {
                        "summary": "Invalid token",
                        "value": {"detail": "Invalid token"}
                    }
                }
            }
        }
    }
}

# Erros para autenticação e registro de usuário
auth_errors = {
    **unauthorized_error,
    409: {
        "description": "Conflict (login already in use)",
        "content": {
            "application/json": {
                "example": {"detail": "Login 'alice' already exists."}
            }
        }
    },
    503: {
        "description": "Session store unavailable (token could not be revoked)",
        "content": {
            "application/json": {
                "example": {"detail": "Session store unavailable."}
            }
        }
    },
    **common_errors
}

# Erros do fluxo de composições
composition_errors = {
    **unauthorized_error,
    403: {
        "description": "Forbidden (not the creator or not a moderator)",
        "content": {
            "application/json": {
                "example": {"success": False, "error": "Moderator access required", "code": "FORBIDDEN"}
            }
        }
    },
    404: {
        "description": "Composition or item not found",
        "content": {
            "application/json": {
                "example": {"success": False, "error": "Composition not found", "code": "NOT_FOUND"}
            }
        }
    },
    409: {
        "description": "Operation not allowed in the current status",
        "content": {
            "application/json": {
                "example": {
                    "success": False,
                    "error": "Cannot complete a composition with status Draft.",
                    "code": "INVALID_TRANSITION",
                    "details": {"current_status": "Draft", "operation": "complete"}
                }
            }
        }
    },
    **common_errors
}

# Erros do catálogo
interval_errors = {
    404: {
        "description": "Interval not found",
        "content": {
            "application/json": {
                "example": {"success": False, "error": "Interval not found", "code": "NOT_FOUND"}
            }
        }
    },
    **common_errors
}

# Erros do callback da calculadora
calculation_errors = {
    401: {
        "description": "Invalid API key",
        "content": {
            "application/json": {
                "example": {"success": False, "error": "Invalid API key", "code": "UNAUTHORIZED"}
            }
        }
    },
    404: {
        "description": "Composition not found",
        "content": {
            "application/json": {
                "example": {"success": False, "error": "Composition with ID 42 not found", "code": "NOT_FOUND"}
            }
        }
    },
    422: {
        "description": "Invalid result value",
        "content": {
            "application/json": {
                "example": {"success": False, "error": "Invalid result", "code": "VALIDATION_ERROR"}
            }
        }
    },
    **common_errors
}
