import os

import uvicorn


def main() -> None:
    """Run the Simple IP Service with uvicorn."""
    uvicorn.run(
        "simple_service.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "true").lower() == "true",
    )


if __name__ == "__main__":
    main()
