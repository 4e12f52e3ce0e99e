# app/main.py
import logging
from fastapi import FastAPI
from sqlalchemy import exc as sa_exc
from app.config import settings
from app.database import engine, Base
from app.core.errors import WorkItemError, work_item_error_handler
from app.models import user, project, work_item, profile  # noqa: F401  register tables
from app.routers import work_items, employees

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Work Item Lifecycle & Capacity Service", version="1.0")

app.add_exception_handler(WorkItemError, work_item_error_handler)

# Include Routers
app.include_router(work_items.router)
app.include_router(employees.router)

# Create DB Tables (for development only; use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    # create tables (async). ignore duplicate-object errors from previous partial runs.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logging.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"message": "Work item service is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
