# Local runner: python main.py
import uvicorn
from decouple import config

if __name__ == "__main__":
    uvicorn.run(
        "catalogbot.main:app",
        host=config("HOST", default="0.0.0.0"),
        port=config("PORT", cast=int, default=8000),
    )
