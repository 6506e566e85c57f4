import argparse
import json
import os
import sys
from dotenv import load_dotenv

# Add project root to path
sys.path.append(os.getcwd())

# Load environment variables
load_dotenv()

import logging
logging.basicConfig(level=logging.INFO)

from config import settings
from routes.search import get_canonicalizer, get_crustdata_client
from services.pipeline import SearchPipeline, parse_prompt

DEFAULT_PROMPT = "AI startups in India with 50-200 employees, Series A funding"


def main():
    parser = argparse.ArgumentParser(description="Parse a prompt into Crustdata filters and cURLs")
    parser.add_argument("prompt", nargs="?", default=DEFAULT_PROMPT)
    parser.add_argument("--live", action="store_true", help="Run the full pipeline against Crustdata")
    args = parser.parse_args()

    print("🚀 Starting ProspectFilter pipeline check")
    print(f"📝 Prompt: {args.prompt}")
    if not settings.mistral_api_key:
        print("⚠️ MISTRAL_API_KEY not found - keyword parsing only")

    canonicalizer = get_canonicalizer()
    parsed = parse_prompt(canonicalizer, args.prompt, settings.crustdata_base_url)

    print("\n✅ Canonical filters:")
    print(json.dumps(parsed.canonical.to_payload(), indent=2))
    print("\n🌐 Screener cURL:")
    print(parsed.curls.screen)
    print("\n🌐 Company search cURL:")
    print(parsed.curls.search)

    if not args.live:
        return

    client = get_crustdata_client()
    if client is None:
        print("❌ CRUSTDATA_API_KEY not found")
        return

    result = SearchPipeline(canonicalizer, client, settings.crustdata_base_url).run(args.prompt)

    print("\n📊 Results:")
    print(f"Steps: {' → '.join(state.value for state in result.trace)}")
    print(f"Outcomes: {', '.join(f'{step}={outcome.value}' for step, outcome in result.outcomes.items())}")
    print(f"Companies enriched: {len(result.companies_enriched)}")
    print(f"Companies with people: {len(result.people_matched)}")
    for company, people in list(result.people_matched.items())[:3]:
        print(f"- {company}: {', '.join(person.name for person in people[:3])}")


if __name__ == "__main__":
    main()
