import asyncio
import sys

import httpx
from dotenv import load_dotenv

from supportdash.core.config import get_agent_defaults
from supportdash.services.extractor import extract_text
from supportdash.services.qa_runner import build_agent_headers, build_payload

# Load environment variables
load_dotenv()

async def check_agent(question):
    print("\n--- Checking agent endpoint ---")
    defaults = get_agent_defaults()
    if not defaults["api_url"] or not defaults["api_key"]:
        print("❌ LANGFLOW_API_URL or LANGFLOW_API_KEY not found.")
        return False

    headers = build_agent_headers(defaults["api_key"], defaults["bearer_token"])
    try:
        async with httpx.AsyncClient() as client:
            res = await client.post(defaults["api_url"], headers=headers, json=build_payload(question), timeout=60)
        if res.status_code >= 400:
            print(f"❌ Agent answered HTTP {res.status_code}")
            return False
        answer = extract_text(res.json())
        if not answer:
            print("❌ Agent answered, but no text could be extracted.")
            return False
        print(f"✅ Agent Success: {answer}")
        return True
    except Exception as e:
        print(f"❌ Agent Failed: {e}")
        return False

if __name__ == "__main__":
    print("🔍 Starting Agent Access Check...")
    ok = asyncio.run(check_agent(" ".join(sys.argv[1:]) or "Hola!"))
    print("\nDone.")
    sys.exit(0 if ok else 1)
