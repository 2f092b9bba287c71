import os
import sys

import uvicorn

# Run from the project root: python scripts/run_server.py
BACKEND_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend")
sys.path.insert(0, BACKEND_DIR)

from server.config import IS_PRODUCTION, PORT  # noqa: E402

if __name__ == "__main__":
    uvicorn.run("server.app:app", host="0.0.0.0", port=PORT, reload=not IS_PRODUCTION, app_dir=BACKEND_DIR)
