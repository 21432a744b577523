"""
Minimal API (FastAPI)

HTTP API for persistent Merkle trees:
- POST /trees - Create or restore a tree
- GET /trees/{name} - Current root and depth
- PUT /trees/{name}/leaves/{index} - Update one leaf
- GET /trees/{name}/hash-path/{index} - Hash path for a leaf
- POST /trees/{name}/verify - Check a hash path
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
