from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from gradebook.core.config import settings
from gradebook.core.database import Base, engine
from gradebook.core.exceptions import GradebookError
from gradebook.core.logging import configure_logging
from gradebook.endpoints import exam
from gradebook.middleware.exceptions import global_exception_handler, validation_exception_handler, gradebook_exception_handler
from gradebook.middleware.logging import RequestLoggingMiddleware
from gradebook.models import exam as exam_models, exam_submission as submission_models, exam_completion as completion_models  # noqa: F401

configure_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(GradebookError, gradebook_exception_handler)

app.include_router(exam.router, prefix="/exams", tags=["Exams"])

@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
