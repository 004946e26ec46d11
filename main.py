import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from sqlalchemy.orm import Session

from config import get_settings
from database import create_schema, get_db
from models import PeriodKind
from periods import Period, local_today, resolve_period
from schemas import (
    BudgetIn,
    BudgetOut,
    BudgetSummaryOut,
    ConflictOut,
    ExpenseIn,
    VocabularyOut,
)
from services import (
    AmbiguousCategoryError,
    BudgetAlreadyExistsError,
    BudgetConflictError,
    BudgetNotFoundError,
    BudgetService,
    UnknownCategoryError,
)

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Budget Tracker")


@app.on_event("startup")
def startup_event():
    if get_settings().auto_create_schema:
        create_schema()
    else:
        logger.info("schema_auto_create: disabled, expecting alembic migrations")


def period_from_request(request: Request) -> Period:
    period_slug = request.query_params.get("period")
    start = request.query_params.get("start")
    end = request.query_params.get("end")
    try:
        return resolve_period(
            period_slug, start, end, today=local_today(get_settings().timezone)
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _write_error(exc: ValueError, svc: BudgetService) -> HTTPException:
    if isinstance(exc, BudgetConflictError):
        return HTTPException(
            status_code=409,
            detail={
                "message": str(exc),
                "conflicts": [
                    svc.serialize(b).model_dump(mode="json")
                    for b in exc.result.conflicts
                ],
            },
        )
    if isinstance(exc, BudgetAlreadyExistsError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, BudgetNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@app.get("/api/categories", response_model=VocabularyOut)
def api_categories():
    settings = get_settings()
    return VocabularyOut(
        categories=list(settings.categories),
        period_kinds=list(PeriodKind),
        currency=settings.currency,
    )


@app.get("/api/budgets", response_model=list[BudgetOut])
def api_list_budgets(db: Session = Depends(get_db)):
    svc = BudgetService(db)
    return [svc.serialize(b) for b in svc.list_all()]


@app.get("/api/budgets/{budget_id}", response_model=BudgetOut)
def api_get_budget(budget_id: int, db: Session = Depends(get_db)):
    svc = BudgetService(db)
    try:
        return svc.serialize(svc.get(budget_id))
    except BudgetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.post("/api/budgets/check", response_model=ConflictOut)
def api_check_budget(
    data: BudgetIn, exclude_id: Optional[int] = None, db: Session = Depends(get_db)
):
    svc = BudgetService(db)
    try:
        result = svc.check(data, exclude_id=exclude_id)
    except (UnknownCategoryError, AmbiguousCategoryError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    message = None
    if result.has_conflict:
        message = svc.conflict_message(result.conflicts[0].category, result)
    return ConflictOut(
        has_conflict=result.has_conflict,
        conflicts=[svc.serialize(b) for b in result.conflicts],
        message=message,
    )


@app.post("/api/budgets", response_model=BudgetOut, status_code=201)
def api_create_budget(data: BudgetIn, db: Session = Depends(get_db)):
    svc = BudgetService(db)
    try:
        budget = svc.create(data)
    except ValueError as exc:
        raise _write_error(exc, svc) from exc
    logger.info(
        f"budget_created: id={budget.id} category={budget.category} "
        f"period={budget.period_kind.value} anchor={budget.anchor_date}"
    )
    return svc.serialize(budget)


@app.put("/api/budgets/{budget_id}", response_model=BudgetOut)
def api_update_budget(budget_id: int, data: BudgetIn, db: Session = Depends(get_db)):
    svc = BudgetService(db)
    try:
        budget = svc.update(budget_id, data)
    except ValueError as exc:
        raise _write_error(exc, svc) from exc
    logger.info(
        f"budget_updated: id={budget.id} category={budget.category} "
        f"period={budget.period_kind.value} anchor={budget.anchor_date}"
    )
    return svc.serialize(budget)


@app.delete("/api/budgets/{budget_id}", status_code=204)
def api_delete_budget(budget_id: int, db: Session = Depends(get_db)):
    try:
        BudgetService(db).delete(budget_id)
    except BudgetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    logger.info(f"budget_deleted: id={budget_id}")
    return Response(status_code=204)


@app.post("/api/expenses", response_model=list[BudgetOut])
def api_record_expense(data: ExpenseIn, db: Session = Depends(get_db)):
    svc = BudgetService(db)
    try:
        touched = svc.record_expense(data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.info(
        f"expense_recorded: category={data.category} date={data.spent_on} "
        f"budgets_touched={len(touched)}"
    )
    return [svc.serialize(b) for b in touched]


@app.get("/api/summary", response_model=BudgetSummaryOut)
def api_summary(request: Request, db: Session = Depends(get_db)):
    period = period_from_request(request)
    return BudgetService(db).summary(period)


def main():
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
