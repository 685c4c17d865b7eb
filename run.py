import uvicorn
from src.baseplate.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "src.baseplate.main:app",
        host="localhost",
        port=settings.SERVER_PORT,
        reload=True,
        log_level="info",
    )
