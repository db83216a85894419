"""
ASGI entrypoint: un process manager importe `roomezes.asgi:app`.
Toute la configuration FastAPI est centralisée dans roomezes.app_setup.factory.
"""

from roomezes.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "roomezes.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
