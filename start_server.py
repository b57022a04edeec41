#!/usr/bin/env python3
"""
Startup script for the Todo Hierarchy Backend
This script starts the FastAPI server with proper configuration
"""

import uvicorn

from app.config.security import SecurityConfig

def main():
    server = SecurityConfig.SERVER

    print("Starting Todo Hierarchy Backend Server...")
    print(f"Host: {server['host']}")
    print(f"Port: {server['port']}")
    print(f"Reload: {server['reload']}")
    print("=" * 50)

    # Start the server
    uvicorn.run(
        "main:app",
        host=server['host'],
        port=server['port'],
        reload=server['reload'],
        log_level=server['log_level'].lower()
    )

if __name__ == "__main__":
    main()
