# app/config/security.py
# Security and application configuration for the to-do service

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class SecurityConfig:
    """Security configuration for the application"""

    # Token settings
    AUTH = {
        'secret_key': os.getenv('SECRET_KEY', 'todo-secret-key-change-me'),
        'algorithm': os.getenv('ALGORITHM', 'HS256'),
        'access_token_expire_minutes': int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 24 * 60)),  # 24h
        'bcrypt_rounds': int(os.getenv('BCRYPT_ROUNDS', 12)),
    }

    # Input bounds
    LIMITS = {
        'password_min_length': int(os.getenv('PASSWORD_MIN_LENGTH', 6)),
        'password_max_length': int(os.getenv('PASSWORD_MAX_LENGTH', 100)),
        'todo_text_max_length': int(os.getenv('TODO_TEXT_MAX_LENGTH', 500)),
        'name_max_length': int(os.getenv('NAME_MAX_LENGTH', 50)),
    }

    # Hierarchy settings
    HIERARCHY = {
        # "union" walks primary managers and manager edges, "edges" only the edge table
        'cycle_check_scope': os.getenv('CYCLE_CHECK_SCOPE', 'union').lower(),
    }

    # Startup seeding
    SEED = {
        'default_users': os.getenv('SEED_DEFAULT_USERS', 'true').lower() == 'true',
        'default_password': os.getenv('DEFAULT_PASSWORD', 'admin123'),
    }

    SERVER = {
        'host': os.getenv('HOST', '0.0.0.0'),
        'port': int(os.getenv('PORT', '3000')),
        'reload': os.getenv('RELOAD', 'false').lower() == 'true',
        'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
    }

    @classmethod
    def get_cors_origins(cls) -> List[str]:
        """Comma separated CORS_ORIGINS, defaulting to local development hosts"""
        raw = os.getenv('CORS_ORIGINS')
        if not raw:
            return [
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            ]
        return [origin.strip() for origin in raw.split(',') if origin.strip()]

    @classmethod
    def walks_primary_managers(cls) -> bool:
        """Whether the cycle check follows users.manager_id as well as edges"""
        return cls.HIERARCHY['cycle_check_scope'] != 'edges'
