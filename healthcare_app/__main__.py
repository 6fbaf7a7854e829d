import uvicorn

from healthcare_app.config import get_settings

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run("healthcare_app.main:app", host=settings.HOST, port=settings.PORT)
