#!/usr/bin/env python3
"""Helper script to check and create the .env file for routing configuration."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Google Routes API (required for order suggestions)
TRIPROUTE_ROUTES_API_KEY=your-api-key-here

# Rate limit shared by every routing call of this process
TRIPROUTE_ROUTES_MAX_REQUESTS_PER_WINDOW=1
TRIPROUTE_ROUTES_WINDOW_SECONDS=1.0

# API Configuration
TRIPROUTE_API_PREFIX=/api
# TRIPROUTE_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
"""


def _mask(value: str) -> str:
    return value[:6] + "..." + value[-4:] if len(value) > 12 else value


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Routing Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"Created template .env file at: {env_file}")
        print("Please edit .env and add your routing API key.")
        return 1

    print(f"Found .env file at: {env_file}")
    env_key = os.getenv("TRIPROUTE_ROUTES_API_KEY")
    if env_key:
        print(f"TRIPROUTE_ROUTES_API_KEY (from environment): {_mask(env_key)}")

    sys.path.insert(0, str(project_root / "src"))
    from triproute.config import settings

    print(f"Routes endpoint: {settings.routes_api_url}")
    print(
        f"Rate limit: {settings.routes_max_requests_per_window} request(s) "
        f"per {settings.routes_window_seconds}s"
    )
    if settings.routes_api_key:
        print(f"Config loaded ROUTES_API_KEY: {_mask(settings.routes_api_key)}")
        return 0
    print("ERROR: TRIPROUTE_ROUTES_API_KEY is not configured")
    return 1


if __name__ == "__main__":
    sys.exit(main())
