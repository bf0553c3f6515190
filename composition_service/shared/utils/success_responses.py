# composition_service/shared/utils/success_responses.py

# Respostas de sucesso genéricas
common_success = {
    200: {
        "description": "Request processed successfully",
        "content": {
            "application/json": {
                "example": {"message": "Operation completed successfully."}
            }
        }
    }
}

# Sucessos para autenticação e usuários
auth_success = {
    201: {
        "description": "User created successfully",
        "content": {
            "application/json": {
                "example": {
                    "id": 1,
                    "login": "alice",
                    "is_moderator": False,
                    "created_at": "2024-01-01 00:00:00",
                    "updated_at": None
                }
            }
        }
    },
    **common_success
}

login_success = {
    200: {
        "description": "Tokens issued",
        "content": {
            "application/json": {
                "example": {
                    "access_token": "eyJhbGciOiJIUzI1NiIs...",
                    "refresh_token": "eyJhbGciOiJIUzI1NiIs...",
                    "token_type": "Bearer",
                    "expires_at": "2024-01-02T00:00:00Z",
                    "user_id": 1,
                    "login": "alice",
                    "is_moderator": False
                }
            }
        }
    }
}

composition_success = {
    200: {
        "description": "Composition",
        "content": {
            "application/json": {
                "example": {
                    "id": 7,
                    "status": "Formed",
                    "title": "Evening study",
                    "creator_id": 1,
                    "moderator_id": None,
                    "belonging": None,
                    "date_create": "2024-01-01 10:00:00",
                    "date_update": "2024-01-01 10:05:00",
                    "date_finish": None
                }
            }
        }
    }
}
