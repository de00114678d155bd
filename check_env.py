#!/usr/bin/env python3
"""Helper script to check and create the .env file for Supabase and geocoding configuration."""

from pathlib import Path
import os

TEMPLATE = """# Supabase Configuration (Required for settings, zones and the geocode cache)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
PIZZA_SUPABASE_URL=https://your-project-id.supabase.co
PIZZA_SUPABASE_KEY=your-service-role-key-here

# API Configuration
PIZZA_API_PREFIX=/api
# PIZZA_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
# PIZZA_FRONTEND_ALLOWED_ORIGINS=http://localhost:3000,http://127.0.0.1:3000

# Geocoding (the API key itself is stored in admin_settings.google_maps_api_key)
# PIZZA_GEOCODING_REGION=br
# PIZZA_GEOCODING_LANGUAGE=pt-BR
"""


def _masked(value: str, keep: int = 20) -> str:
    return value[:keep] + "..." if len(value) > keep else value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Delivery Service Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        print("Creating template .env file...")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Supabase credentials!")
        return

    print(f"✅ Found .env file at: {env_file}")
    print()

    for name in ("PIZZA_SUPABASE_URL", "PIZZA_SUPABASE_KEY"):
        value = os.getenv(name)
        if value:
            print(f"✅ {name} (from environment): {_masked(value)}")
        else:
            print(f"❌ {name} not found in environment")
    print()

    print("Testing config loading...")
    try:
        import sys
        sys.path.insert(0, str(project_root / "src"))
        from pizzeria_delivery.config import settings

        if settings.supabase_url and settings.supabase_key:
            print("=" * 60)
            print("✅ SUCCESS: Supabase is configured!")
            print("=" * 60)
        else:
            print("=" * 60)
            print("❌ ERROR: Supabase is NOT configured")
            print("=" * 60)
            print("Troubleshooting:")
            print("1. Make sure .env file exists in project root")
            print("2. Make sure variables start with PIZZA_ prefix")
            print("3. Restart the backend after editing .env")
        print(f"Geocoding endpoint: {settings.geocoding_base_url} (region={settings.geocoding_region})")
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")


if __name__ == "__main__":
    main()
