"""
Application Entry Point
Run with: python main.py or uvicorn siteindex.api.main:create_app --factory --reload
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "siteindex.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,  # Auto-reload on code changes (dev only)
        log_level="info",
    )
