import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from sdk_docs_mcp.catalog.loader import load_catalog
from sdk_docs_mcp.config import settings
from sdk_docs_mcp.search.orchestrator import SearchOrchestrator


async def main():
    print(f"Loading catalog from {settings.catalog_path}...")
    catalog = load_catalog(settings.catalog_path)
    print(f"Found {len(catalog)} entries.")

    orchestrator = SearchOrchestrator(catalog, settings)
    chain = orchestrator.resolve_provider_chain()
    primary = chain[0]
    print(f"Provider chain: {' -> '.join(chain)}")

    if primary == "lexical":
        print("Primary provider is lexical; nothing to embed.")
        return

    try:
        provider = await orchestrator.registry.get(primary)
        print(f"Building vector index for '{primary}' (this may take time)...")
        index = await provider.load_index()
        print(f"Done! {len(index)} vectors cached at {provider.cache.path}")
    finally:
        await orchestrator.aclose()


if __name__ == "__main__":
    asyncio.run(main())
