#!/usr/bin/env python3
"""
Serves the concept linker HTTP API.

Usage:
    uv run python3 tools/ConceptGraphServer.py [port]
"""

import logging
import sys

from com_blockether_conceptlinker.asgi import ASGIConfig, ASGICoreApplication, CORSConfig
from com_blockether_conceptlinker.knowledge.ConceptLinkerASGIModule import ConceptLinkerASGIModule

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def create_app() -> ASGICoreApplication:
    """Create the application with the concept linker module mounted under /api."""
    app = ASGICoreApplication(
        ASGIConfig(
            title="Concept Linker API",
            cors_config=CORSConfig(),
        )
    )
    app.mount_module(ConceptLinkerASGIModule())
    return app


app = create_app()


def main() -> None:
    """Run the concept linker server."""
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8000

    print("\n" + "=" * 70)
    print("🔗 Concept Linker API")
    print("=" * 70)
    print("\n📡 Server Endpoints:")
    print(f"  • Generate: POST http://localhost:{port}/api/generate")
    print(f"  • Status:   GET  http://localhost:{port}/api/status/<jobId>")
    print(f"  • Download: GET  http://localhost:{port}/api/download/<jobId>")
    print(f"  • API Docs: http://localhost:{port}/docs")
    print("\n" + "=" * 70 + "\n")

    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
