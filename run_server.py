#!/usr/bin/env python3
"""
Convenience script to run the DirectGO Server.
"""
import uvicorn
from directgo_server.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "directgo_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )
