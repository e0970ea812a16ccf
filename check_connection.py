#!/usr/bin/env python3
"""
Quick script to check the configured backends
Run with: poetry run python check_connection.py
"""

import asyncio
from app.core.config import settings
from app.core.context import AppContext


async def check_connection() -> bool:
    print("🔍 Checking PAAM API backends...")
    print("=" * 50)

    print(f"\n📋 Configuration:")
    print(f"   ENVIRONMENT: {settings.environment}")
    print(f"   SUPABASE_URL: {settings.supabase_url or '❌ Not set'}")
    print(f"   DATABASE_URL: {'set' if settings.database_url else '❌ Not set'}")
    print(f"   OPENAI_API_KEY: {'set' if settings.openai_api_key else '❌ Not set'}")

    context = AppContext.from_settings(settings)
    try:
        ok = True
        if context.supabase.supabase:
            print("\n✅ Supabase client initialized!")
        else:
            print("\n❌ Supabase client not initialized, token fallback checks will fail")

        if context.database is None:
            print("❌ No database configured")
            ok = False
        elif await context.database.ping():
            print("✅ Database reachable (system_settings readable)")
        else:
            print("❌ Database unreachable or schema missing")
            print("   Run `alembic upgrade head` or set AUTO_CREATE_TABLES=true")
            ok = False

        print("✅ Completion API configured" if context.completions.is_configured else "⚠️  Completion API not configured")
        print("\n" + "=" * 50)
        return ok
    finally:
        await context.shutdown()


if __name__ == "__main__":
    success = asyncio.run(check_connection())
    exit(0 if success else 1)
