import uvicorn

from studylib.configs.setup import create_app
from studylib.configs.settings import settings

app = create_app()


if __name__ == "__main__":
    uvicorn.run("studylib.main:app", host=settings.APP_HOST, port=settings.APP_PORT, reload=settings.APP_ENV == "dev")
