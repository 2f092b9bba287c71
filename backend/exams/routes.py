"""Test CRUD + bulk import/clear routes."""

from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from server.container import Planner, get_planner
from auth.utils import get_owner_key
from exams.schemas import ImportResult, Test, TestDraft, TestImport

router = APIRouter()


@router.get("/tests", response_model=List[Test])
async def get_tests(
    force: bool = False,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    return list(await planner.tests.list(owner_key, force=force))


@router.post("/tests", response_model=Test, status_code=201)
async def create_test(body: TestDraft, owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    test_id = await planner.tests.create(owner_key, body)
    return await planner.tests.get(owner_key, test_id)


@router.post("/tests/import", response_model=ImportResult, status_code=201)
async def import_tests(body: TestImport, owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    ids = await planner.tests.import_batch(owner_key, body.tests)
    return ImportResult(ids=ids, count=len(ids))


@router.delete("/tests")
async def clear_tests(
    confirm: bool = False,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    if not confirm:
        raise HTTPException(status_code=400, detail="Clearing all tests is irreversible; pass confirm=true")
    deleted = await planner.tests.clear_all(owner_key)
    return {"message": "All tests cleared", "deleted": deleted}


@router.get("/tests/upcoming", response_model=Optional[Test])
async def get_upcoming_test(
    today: Optional[date] = None,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    return await planner.tests.upcoming(owner_key, today or date.today())


@router.get("/tests/{test_id}", response_model=Test)
async def get_test(test_id: str, owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    return await planner.tests.get(owner_key, test_id)


@router.delete("/tests/{test_id}")
async def delete_test(test_id: str, owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    await planner.tests.delete(owner_key, test_id)
    return {"message": "Test deleted"}
